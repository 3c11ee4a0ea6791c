"""Gemini API 客户端。

nano-banana-cli gemini v0.1.0

串联一次调用的全部步骤：
    校验请求 -> 解析凭据 -> 构建请求 -> 发送 -> 解析响应 -> 输出

严格顺序执行，只尝试一次。任何 NanoBananaError 都转换为失败的
GenerationOutcome 返回给调用方，不会在内部重试。
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid

from ..config import Config, load_config
from .credentials import CredentialResolver
from .debug_utils import excerpt, mask_token, sanitize_for_debug, sanitize_headers
from .decoder import decode_response
from .errors import NanoBananaError
from .output import OutputSink
from .request_builder import RequestBuilder, validate_request
from .transport import AiohttpTransport, Transport
from .types import GenerationOutcome, GenerationRequest, RequestState

__all__ = ["GeminiClient"]

logger = logging.getLogger(__name__)


class GeminiClient:
    """Gemini generateContent 客户端。

    Example:
        client = GeminiClient()
        outcome = await client.generate(
            GenerationRequest(modality=Modality.IMAGE, prompt="A cat", output_path="cat.png"),
            explicit_key=args.api_key,
        )
    """

    def __init__(
        self,
        config: Config | None = None,
        resolver: CredentialResolver | None = None,
        transport: Transport | None = None,
        sink: OutputSink | None = None,
    ) -> None:
        """初始化客户端。

        Args:
            config: 运行配置（可选，默认从环境变量加载）
            resolver: 凭据解析器（可选，默认 参数 -> 环境变量 -> 密钥库）
            transport: HTTP 传输（可选，默认 aiohttp，由客户端负责关闭）
            sink: 结果输出（可选，默认 stdout / 文件）
        """
        self._config = config or load_config()
        self._resolver = resolver or CredentialResolver.from_config(self._config)
        self._owns_transport = transport is None
        self._transport: Transport = transport or AiohttpTransport(timeout=self._config.timeout)
        self._builder = RequestBuilder(self._config)
        self._sink = sink or OutputSink()

    async def close(self) -> None:
        """关闭自己创建的传输。"""
        if self._owns_transport:
            await self._transport.close()

    async def generate(
        self,
        request: GenerationRequest,
        explicit_key: str | None = None,
    ) -> GenerationOutcome:
        """执行一次生成。

        Args:
            request: 生成请求
            explicit_key: 显式传入的 API key（--api-key）

        Returns:
            GenerationOutcome；失败时 error 字段为对应异常
        """
        request_id = str(uuid.uuid4())[:8]
        outcome = GenerationOutcome(
            request_id=request_id,
            model=self._builder.model_for(request.modality),
            api_url=self._builder.endpoint_for(request.modality),
        )
        logger.debug(
            f"[{request_id}] generation started: modality={request.modality.value}, "
            f"prompt={excerpt(request.prompt, 100)!r}"
        )

        try:
            # 先校验，避免无效请求浪费凭据查询和网络调用
            validate_request(request)
            credential = await self._resolver.resolve(explicit_key)
            outcome.auth_hint = mask_token(credential.value)

            built = self._builder.build(request, credential)
            outcome.state = RequestState.BUILT
            logger.debug(
                f"[{request_id}] {built.method} {built.url} "
                f"headers={sanitize_headers(built.headers)} "
                f"body={json.dumps(sanitize_for_debug(built.body), ensure_ascii=False)}"
            )

            response = await self._transport.post(built.url, built.headers, built.body_json())
            outcome.state = RequestState.SENT

            result = decode_response(request.modality, response.status, response.body)
            outcome.state = RequestState.DECODED
            outcome.result = result

            outcome.output_path = self._sink.deliver(result, request)
            outcome.state = RequestState.DELIVERED
            logger.debug(f"[{request_id}] generation completed")
            return outcome

        except NanoBananaError as e:
            logger.debug(f"[{request_id}] generation failed in state {outcome.state.value}: {e}")
            outcome.state = RequestState.FAILED
            outcome.error = e
            return outcome

        except asyncio.CancelledError:
            # 取消错误必须 re-raise，不能被吞掉
            logger.debug(f"[{request_id}] generation cancelled")
            raise

        finally:
            await self.close()
