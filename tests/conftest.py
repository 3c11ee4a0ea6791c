"""Pytest 配置和 fixtures。"""

from __future__ import annotations

import base64
import json
import sys
from pathlib import Path
from typing import Any

import pytest

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 添加 src 目录到 Python 路径
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from nano_banana_cli.config import Config  # noqa: E402
from nano_banana_cli.gemini.types import HttpResponse  # noqa: E402


class StubTransport:
    """记录调用次数的传输桩。"""

    def __init__(self, response: HttpResponse | None = None, error: Exception | None = None) -> None:
        self.response = response or HttpResponse(200, text_body("ok"))
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def post(self, url: str, headers: dict[str, str], body: bytes) -> HttpResponse:
        self.calls.append({"url": url, "headers": headers, "body": body})
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self) -> None:
        self.closed = True


def text_body(text: str) -> str:
    """构造文本成功响应。"""
    return json.dumps({
        "candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}],
    })


def image_body(data: bytes, mime_type: str = "image/png", caption: str | None = None) -> str:
    """构造图片成功响应。"""
    parts: list[dict[str, Any]] = []
    if caption is not None:
        parts.append({"text": caption})
    parts.append({
        "inlineData": {
            "mimeType": mime_type,
            "data": base64.b64encode(data).decode("ascii"),
        }
    })
    return json.dumps({"candidates": [{"content": {"parts": parts}}]})


def error_body(code: int, message: str, status: str) -> str:
    """构造错误信封。"""
    return json.dumps({"error": {"code": code, "message": message, "status": status}})


@pytest.fixture
def config() -> Config:
    """固定配置（不读取环境变量）。"""
    return Config(
        base_url="https://example.test/v1beta",
        text_model="text-model",
        image_model="image-model",
    )


@pytest.fixture
def stub_transport() -> StubTransport:
    return StubTransport()
