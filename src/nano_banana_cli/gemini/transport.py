"""HTTP 传输层。

nano-banana-cli gemini v0.1.0

使用 aiohttp 异步发送请求。只做一次尝试，不重试；
状态码的解释交给 decoder。
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

import aiohttp

from .errors import TransportError
from .types import HttpResponse

__all__ = ["Transport", "AiohttpTransport"]

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """HTTP POST 能力。"""

    async def post(self, url: str, headers: dict[str, str], body: bytes) -> HttpResponse:
        ...

    async def close(self) -> None:
        ...


class AiohttpTransport:
    """基于 aiohttp 的传输实现。

    Example:
        async with AiohttpTransport(timeout=300) as transport:
            response = await transport.post(url, headers, body)
    """

    def __init__(self, timeout: float | None = None) -> None:
        """初始化传输。

        Args:
            timeout: 请求总超时（秒），None 使用 aiohttp 默认值
        """
        self._timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话。"""
        if self._session is None or self._session.closed:
            if self._timeout is not None:
                self._session = aiohttp.ClientSession(timeout=self._timeout)
            else:
                self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """关闭 HTTP 会话。"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def post(self, url: str, headers: dict[str, str], body: bytes) -> HttpResponse:
        """发送 POST 请求。

        Raises:
            TransportError: 网络错误或超时
        """
        session = await self._get_session()
        start_time = time.time()
        try:
            async with session.post(url, data=body, headers=headers) as resp:
                text = await resp.text()
                duration_ms = int((time.time() - start_time) * 1000)
                logger.debug(f"POST {url} -> {resp.status} ({duration_ms} ms, {len(text)} chars)")
                return HttpResponse(status=resp.status, body=text)
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request timed out: {url}") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Network error: {e}") from e
