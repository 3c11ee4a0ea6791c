"""Debug utilities for request/response logging.

nano-banana-cli gemini v0.1.0

Nothing written to the debug log may contain a credential, and request or
response bodies are shortened: inline image payloads become size summaries,
long prompts and model text are truncated.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "sanitize_for_debug",
    "sanitize_headers",
    "mask_token",
    "excerpt",
]

EXCERPT_LIMIT = 200
LOG_TEXT_LIMIT = 100

SENSITIVE_HEADERS = frozenset({"authorization", "x-goog-api-key"})

# inlineData / inline_data 下承载 base64 的字段
INLINE_PAYLOAD_KEYS = frozenset({"inlineData", "inline_data"})


def excerpt(text: str, limit: int = EXCERPT_LIMIT) -> str:
    """Truncate a body or prompt for messages and logs."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def sanitize_for_debug(data: Any, text_limit: int = LOG_TEXT_LIMIT) -> Any:
    """Shorten a generateContent body for the debug log."""
    if isinstance(data, dict):
        result: dict[str, Any] = {}
        for key, value in data.items():
            if key in INLINE_PAYLOAD_KEYS and isinstance(value, dict):
                payload = value.get("data")
                summary = dict(value)
                if isinstance(payload, str):
                    summary["data"] = f"<base64:{len(payload)} chars>"
                result[key] = summary
            else:
                result[key] = sanitize_for_debug(value, text_limit)
        return result
    if isinstance(data, list):
        return [sanitize_for_debug(item, text_limit) for item in data]
    if isinstance(data, str):
        return excerpt(data, text_limit)
    return data


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Mask credential headers, keeping a Bearer scheme visible."""
    result = {}
    for name, value in headers.items():
        if name.lower() not in SENSITIVE_HEADERS:
            result[name] = value
        elif value.startswith("Bearer "):
            result[name] = "Bearer ***"
        else:
            result[name] = "***"
    return result


def mask_token(token: str, visible: int = 4) -> str:
    """Short credential hint for diagnostics: first and last few characters."""
    secret = token.removeprefix("Bearer ").strip()
    if not secret:
        return "(empty)"
    if len(secret) <= visible * 2:
        return secret[:2] + "***"
    return f"{secret[:visible]}...{secret[-visible:]}"
