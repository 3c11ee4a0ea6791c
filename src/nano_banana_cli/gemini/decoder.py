"""generateContent 响应解析。

nano-banana-cli gemini v0.1.0

纯函数，不做任何落盘操作。根据请求声明的 modality 选择解析分支，
而不是根据响应内容猜测。
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from .debug_utils import excerpt
from .errors import MalformedResponseError, NoImageReturnedError, ProviderError
from .types import GenerationResult, ImageResult, Modality, TextResult

__all__ = ["decode_response", "is_success_status"]


def is_success_status(status: int) -> bool:
    return 200 <= status < 300


def _as_text(raw_body: str | bytes) -> str:
    if isinstance(raw_body, bytes):
        return raw_body.decode("utf-8", errors="replace")
    return raw_body


def _load_json(http_status: int, text: str) -> Any:
    """解析 JSON，失败时抛出 MalformedResponseError。"""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        raise MalformedResponseError(http_status, "body is not valid JSON", excerpt(text))


def _decode_error(http_status: int, raw_body: str | bytes) -> ProviderError:
    """解析错误信封 {"error": {"code", "message", "status"}}。"""
    text = _as_text(raw_body)
    payload = _load_json(http_status, text)

    error = payload.get("error") if isinstance(payload, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    if not isinstance(message, str) or not message:
        raise MalformedResponseError(http_status, "unexpected error envelope", excerpt(text))

    status_name = error.get("status")
    if isinstance(status_name, str) and status_name:
        message = f"{status_name}: {message}"
    return ProviderError(http_status, message)


def _first_candidate(http_status: int, payload: Any, text: str) -> dict[str, Any]:
    """取第一个候选。"""
    if not isinstance(payload, dict):
        raise MalformedResponseError(http_status, "response is not a JSON object", excerpt(text))

    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        reason = "no candidates in response"
        feedback = payload.get("promptFeedback")
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            reason = f"prompt blocked ({feedback['blockReason']})"
        raise MalformedResponseError(http_status, reason, excerpt(text))

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise MalformedResponseError(http_status, "candidate is not a JSON object", excerpt(text))
    return candidate


def _candidate_parts(candidate: dict[str, Any]) -> list[Any] | None:
    """返回候选的原始 parts 列表，缺失时返回 None。"""
    content = candidate.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    return parts if isinstance(parts, list) else None


def _decode_text(http_status: int, candidate: dict[str, Any], text: str) -> TextResult:
    parts = _candidate_parts(candidate)
    if parts is None:
        raise MalformedResponseError(http_status, "candidate has no content parts", excerpt(text))
    # 按原始位置取第一个 part，不跳过非对象元素
    first = parts[0] if parts else None
    if not isinstance(first, dict) or not isinstance(first.get("text"), str):
        raise MalformedResponseError(http_status, "first part has no text", excerpt(text))
    return TextResult(content=first["text"])


def _decode_image(http_status: int, candidate: dict[str, Any]) -> ImageResult:
    finish_reason = candidate.get("finishReason")
    if not isinstance(finish_reason, str):
        finish_reason = None

    # 没有 content（如 finishReason=IMAGE_SAFETY）同样视为未返回图片
    texts: list[str] = []
    for part in _candidate_parts(candidate) or []:
        if not isinstance(part, dict):
            continue
        # 兼容 inlineData 和 inline_data
        inline_data = part.get("inlineData") or part.get("inline_data")
        if isinstance(inline_data, dict) and inline_data.get("data"):
            mime_type = inline_data.get("mimeType") or inline_data.get("mime_type") or "image/png"
            try:
                data = base64.b64decode(inline_data["data"], validate=True)
            except (binascii.Error, ValueError, TypeError):
                raise MalformedResponseError(http_status, "inline data is not valid base64")
            return ImageResult(data=data, mime_type=mime_type)

        if isinstance(part.get("text"), str) and part["text"].strip():
            texts.append(part["text"].strip())

    raise NoImageReturnedError(http_status, "\n".join(texts) or None, finish_reason)


def decode_response(
    modality: Modality,
    http_status: int,
    raw_body: str | bytes,
) -> GenerationResult:
    """解析 API 响应。

    Args:
        modality: 请求声明的生成模式
        http_status: HTTP 状态码
        raw_body: 原始响应体

    Returns:
        TextResult 或 ImageResult

    Raises:
        ProviderError: API 返回错误信封
        MalformedResponseError: 响应结构不符合预期
        NoImageReturnedError: 图片请求没有返回图片
    """
    if not is_success_status(http_status):
        raise _decode_error(http_status, raw_body)

    text = _as_text(raw_body)
    payload = _load_json(http_status, text)
    candidate = _first_candidate(http_status, payload, text)

    if modality is Modality.IMAGE:
        return _decode_image(http_status, candidate)
    return _decode_text(http_status, candidate, text)
