"""API 凭据解析链。

nano-banana-cli gemini v0.1.0

按固定优先级依次查询：
1. 调用方显式传入的值（--api-key）
2. 环境变量（GOOGLE_AI_STUDIO_API_KEY）
3. 系统密钥库（keyring，服务名 google-ai-studio）

命中第一个非空值即返回，后续来源不再查询。单个来源查询失败不会中断解析，
只记录日志并继续下一个来源。
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Mapping, Optional, Sequence

import keyring

from ..config import Config
from .errors import NoCredentialFoundError
from .types import Credential

__all__ = [
    "LookupStatus",
    "LookupOutcome",
    "CredentialSource",
    "CredentialResolver",
    "explicit_source",
    "env_source",
    "secret_store_source",
    "default_sources",
]

logger = logging.getLogger(__name__)

# 密钥库查询函数：(service, username) -> keyring Credential | None
SecretGetter = Callable[[str, Optional[str]], object]


class LookupStatus(str, Enum):
    """单个来源的查询结果状态。"""
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True, repr=False)
class LookupOutcome:
    """单个来源的查询结果。

    Attributes:
        status: 查询状态
        value: 凭据值（status=PRESENT 时）
        detail: 失败原因（status=ERROR 时）
    """
    status: LookupStatus
    value: str = ""
    detail: str = ""

    @classmethod
    def present(cls, value: str) -> "LookupOutcome":
        return cls(LookupStatus.PRESENT, value=value)

    @classmethod
    def absent(cls) -> "LookupOutcome":
        return cls(LookupStatus.ABSENT)

    @classmethod
    def error(cls, detail: str) -> "LookupOutcome":
        return cls(LookupStatus.ERROR, detail=detail)

    @classmethod
    def from_value(cls, value: str | None) -> "LookupOutcome":
        """空值或纯空白视为不存在。"""
        if value and value.strip():
            return cls.present(value.strip())
        return cls.absent()

    def __repr__(self) -> str:
        return f"LookupOutcome(status={self.status.value}, detail={self.detail!r})"


@dataclass(frozen=True)
class CredentialSource:
    """凭据来源。

    Attributes:
        name: 来源名称（用于诊断信息）
        lookup: 异步查询函数
    """
    name: str
    lookup: Callable[[], Awaitable[LookupOutcome]]


def explicit_source(value: str | None) -> CredentialSource:
    """调用方显式传入的 API key。"""

    async def lookup() -> LookupOutcome:
        return LookupOutcome.from_value(value)

    return CredentialSource("--api-key", lookup)


def env_source(name: str, environ: Mapping[str, str] | None = None) -> CredentialSource:
    """从环境变量读取 API key。"""

    async def lookup() -> LookupOutcome:
        env = os.environ if environ is None else environ
        return LookupOutcome.from_value(env.get(name))

    return CredentialSource(f"env:{name}", lookup)


def secret_store_source(
    service: str,
    username: str | None = None,
    getter: SecretGetter | None = None,
) -> CredentialSource:
    """从系统密钥库读取 API key。

    keyring 调用是阻塞的，放到线程中执行。后端不可用、未解锁等任何异常
    都转换为 ERROR 结果，交由解析器继续下一个来源。

    Args:
        service: 密钥库服务名
        username: 密钥库用户名，None 表示取该服务下任意条目
        getter: 查询函数（默认 keyring.get_credential，测试时可替换）
    """
    get_credential = getter or keyring.get_credential

    async def lookup() -> LookupOutcome:
        try:
            stored = await asyncio.to_thread(get_credential, service, username)
        except Exception as e:
            return LookupOutcome.error(f"{type(e).__name__}: {e}")
        if stored is None:
            return LookupOutcome.absent()
        return LookupOutcome.from_value(getattr(stored, "password", None))

    return CredentialSource(f"keyring:{service}", lookup)


def default_sources(
    config: Config,
    environ: Mapping[str, str] | None = None,
    getter: SecretGetter | None = None,
) -> list[CredentialSource]:
    """构建显式值之后的后备来源：环境变量、密钥库。"""
    return [
        env_source(config.api_key_env, environ),
        secret_store_source(config.secret_service, config.secret_username, getter),
    ]


class CredentialResolver:
    """按顺序扫描来源，返回第一个存在的凭据。

    显式传入的值总是排在第一位，其后是构造时给定的后备来源。

    Example:
        resolver = CredentialResolver.from_config(config)
        credential = await resolver.resolve(args.api_key)
    """

    def __init__(self, sources: Sequence[CredentialSource]) -> None:
        self._sources = list(sources)

    @classmethod
    def from_config(
        cls,
        config: Config,
        environ: Mapping[str, str] | None = None,
        getter: SecretGetter | None = None,
    ) -> "CredentialResolver":
        return cls(default_sources(config, environ, getter))

    def sources_for(self, explicit: str | None) -> list[CredentialSource]:
        """返回本次解析实际使用的来源列表。"""
        return [explicit_source(explicit), *self._sources]

    async def resolve(self, explicit: str | None = None) -> Credential:
        """解析凭据。

        Args:
            explicit: 调用方显式传入的 API key

        Returns:
            Credential 实例

        Raises:
            NoCredentialFoundError: 所有来源均未提供凭据
        """
        attempted: list[str] = []
        for source in self.sources_for(explicit):
            attempted.append(source.name)
            outcome = await source.lookup()

            if outcome.status is LookupStatus.PRESENT:
                logger.debug(f"API key resolved from {source.name}")
                return Credential(value=outcome.value, source=source.name)

            if outcome.status is LookupStatus.ERROR:
                logger.warning(f"Credential lookup failed for {source.name}: {outcome.detail}")
            else:
                logger.debug(f"No API key from {source.name}")

        raise NoCredentialFoundError(attempted)
