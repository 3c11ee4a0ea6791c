"""Gemini 模块异常类。

nano-banana-cli gemini v0.1.0
"""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "NanoBananaError",
    "NoCredentialFoundError",
    "InvalidRequestError",
    "ProviderError",
    "MalformedResponseError",
    "NoImageReturnedError",
    "TransportError",
    "OutputError",
    "RETRIABLE_STATUS_CODES",
]

# 仅作提示，客户端内部不会自动重试
RETRIABLE_STATUS_CODES = frozenset({429, 503})


class NanoBananaError(Exception):
    """模块基础异常。"""
    pass


class NoCredentialFoundError(NanoBananaError):
    """所有凭据来源都未提供 API key。

    Attributes:
        sources: 按顺序尝试过的来源名称
    """

    def __init__(self, sources: Sequence[str]) -> None:
        self.sources = list(sources)
        tried = ", ".join(self.sources) or "(none)"
        super().__init__(f"No API key found. Tried: {tried}")


class InvalidRequestError(NanoBananaError):
    """请求参数错误（如空提示词、缺少输出路径）。"""
    pass


class ProviderError(NanoBananaError):
    """API 返回的错误响应。

    Attributes:
        status_code: HTTP 状态码
        message: 错误消息
        retriable: 是否建议稍后重试
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        self.retriable = status_code in RETRIABLE_STATUS_CODES
        super().__init__(f"[{status_code}] {message}")


class MalformedResponseError(NanoBananaError):
    """响应结构无法解析。

    Attributes:
        status_code: HTTP 状态码
        excerpt: 截断后的响应体片段
    """

    def __init__(self, status_code: int, reason: str, excerpt: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.excerpt = excerpt
        message = f"[{status_code}] Malformed response: {reason}"
        if excerpt:
            message = f"{message}: {excerpt}"
        super().__init__(message)


class NoImageReturnedError(MalformedResponseError):
    """图片请求成功返回，但响应中没有图片（通常是模型拒绝并附带说明）。

    Attributes:
        accompanying_text: 模型随附的文本说明
        finish_reason: 候选的 finishReason（如 IMAGE_SAFETY）
    """

    def __init__(
        self,
        status_code: int,
        accompanying_text: str | None = None,
        finish_reason: str | None = None,
    ) -> None:
        self.accompanying_text = accompanying_text
        self.finish_reason = finish_reason
        reason = "No image data in response"
        if finish_reason:
            reason = f"{reason} (finishReason: {finish_reason})"
        super().__init__(status_code, reason)


class TransportError(NanoBananaError):
    """网络层错误（连接失败、超时）。"""
    pass


class OutputError(NanoBananaError):
    """结果落盘失败（目标是目录、无权限、磁盘已满等）。

    Attributes:
        path: 目标路径
        reason: 底层 OSError
    """

    def __init__(self, path: str, reason: OSError) -> None:
        self.path = path
        self.reason = reason
        detail = reason.strerror or str(reason)
        super().__init__(f"Failed to write {path}: {detail}")
