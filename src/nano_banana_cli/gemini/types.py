"""Gemini 模块类型定义。

nano-banana-cli gemini v0.1.0
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .debug_utils import mask_token

__all__ = [
    "Modality",
    "RequestState",
    "Credential",
    "GenerationRequest",
    "TextResult",
    "ImageResult",
    "GenerationResult",
    "BuiltRequest",
    "HttpResponse",
    "GenerationOutcome",
]


class Modality(str, Enum):
    """生成模式。"""
    TEXT = "text"
    IMAGE = "image"


class RequestState(str, Enum):
    """单次请求的生命周期状态（线性推进，不回退）。"""
    BUILT = "built"
    SENT = "sent"
    DECODED = "decoded"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass(frozen=True, repr=False)
class Credential:
    """API 凭据。

    Attributes:
        value: 原始 token（不可打印）
        source: 提供该 token 的来源名称
    """
    value: str
    source: str

    def __repr__(self) -> str:
        return f"Credential(source={self.source!r}, value={mask_token(self.value)!r})"

    __str__ = __repr__


@dataclass
class GenerationRequest:
    """生成请求。

    Attributes:
        modality: 生成模式
        prompt: 自然语言提示词
        output_path: 图片落盘路径（modality=IMAGE 时必填）
    """
    modality: Modality
    prompt: str
    output_path: str = ""


@dataclass(frozen=True)
class TextResult:
    """文本生成结果。"""
    content: str


@dataclass(frozen=True)
class ImageResult:
    """图片生成结果。

    Attributes:
        data: 解码后的图片字节
        mime_type: 响应声明的 MIME 类型
    """
    data: bytes
    mime_type: str = "image/png"


GenerationResult = Union[TextResult, ImageResult]


@dataclass(frozen=True)
class BuiltRequest:
    """构建完成、尚未发送的 HTTP 请求。"""
    url: str
    headers: dict[str, str]
    body: dict[str, Any]
    method: str = "POST"

    def body_json(self) -> bytes:
        """序列化请求体（输出稳定，相同输入得到相同字节）。"""
        return json.dumps(
            self.body,
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
        ).encode("utf-8")


@dataclass(frozen=True)
class HttpResponse:
    """传输层返回的原始响应。"""
    status: int
    body: str


@dataclass
class GenerationOutcome:
    """一次调用的最终结果，交给 CLI 层映射为退出码。

    Attributes:
        request_id: 请求 ID
        state: 最终状态
        result: 生成结果（成功时）
        error: 异常（失败时）
        output_path: 图片落盘路径（绝对路径）
        model: 使用的模型
        api_url: 请求的 API 完整路径（用于 debug）
        auth_hint: 脱敏后的认证信息（用于 debug）
    """
    request_id: str
    state: RequestState = RequestState.BUILT
    result: GenerationResult | None = None
    error: Exception | None = None
    output_path: str = ""
    model: str = ""
    api_url: str = ""
    auth_hint: str = ""

    @property
    def success(self) -> bool:
        return self.error is None and self.state is RequestState.DELIVERED
