"""nano-banana-cli 环境变量配置管理。

环境变量:
    GOOGLE_AI_STUDIO_API_KEY: API key（--api-key 未指定时使用）

    NANO_BANANA_ENDPOINT: API 端点 URL
        - 默认 https://generativelanguage.googleapis.com/v1beta
        - 未带版本路径时自动补全 /v1beta

    NANO_BANANA_TEXT_MODEL: 文本生成模型（默认 gemini-2.0-flash）
    NANO_BANANA_IMAGE_MODEL: 图片生成模型（默认 gemini-2.0-flash-exp-image-generation）

    NANO_BANANA_SECRET_SERVICE: 系统密钥库中的服务名（默认 google-ai-studio）
    NANO_BANANA_SECRET_USERNAME: 系统密钥库中的用户名（可选）

    NANO_BANANA_TIMEOUT: HTTP 请求总超时（秒，默认 300）

    NANO_BANANA_LOG_DEBUG: 日志调试模式
        - true/1/yes/on = 开启 (日志输出到临时文件)
        - false/0/no = 关闭 (默认，日志输出到 stderr)
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

__all__ = [
    "API_KEY_ENV",
    "DEFAULT_ENDPOINT",
    "DEFAULT_TEXT_MODEL",
    "DEFAULT_IMAGE_MODEL",
    "DEFAULT_SECRET_SERVICE",
    "Config",
    "load_config",
]

API_KEY_ENV = "GOOGLE_AI_STUDIO_API_KEY"

DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TEXT_MODEL = "gemini-2.0-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.0-flash-exp-image-generation"
DEFAULT_SECRET_SERVICE = "google-ai-studio"
DEFAULT_TIMEOUT = 300.0


def _normalize_endpoint(url: str) -> str:
    """规范化端点 URL，自动补全版本路径。"""
    url = url.rstrip("/")
    # 已有版本路径则不处理
    if url.endswith(("/v1beta", "/v1", "/v2")):
        return url
    return f"{url}/v1beta"


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """解析布尔值环境变量。"""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_float(value: str | None, default: float) -> float:
    """解析正浮点数环境变量，无效值返回默认值。"""
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


@dataclass
class Config:
    """运行配置。

    Attributes:
        base_url: API 端点 URL
        text_model: 文本生成模型 ID
        image_model: 图片生成模型 ID
        api_key_env: 读取 API key 的环境变量名
        secret_service: 密钥库服务名
        secret_username: 密钥库用户名（空表示任意）
        timeout: HTTP 请求总超时（秒）
        log_debug: 日志调试模式（输出到临时文件）
        log_file: 日志文件路径（当 log_debug=True 时自动设置）
    """

    base_url: str = DEFAULT_ENDPOINT
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    api_key_env: str = API_KEY_ENV
    secret_service: str = DEFAULT_SECRET_SERVICE
    secret_username: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    log_debug: bool = False
    log_file: str | None = None


def _generate_log_file_path() -> str:
    """生成日志文件路径。

    Returns:
        临时目录下的日志文件绝对路径
    """
    log_dir = Path(tempfile.gettempdir()) / "nano-banana-cli"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return str(log_dir / f"nano_banana_debug_{timestamp}.log")


def load_config() -> Config:
    """从环境变量加载配置。

    Returns:
        Config 实例
    """
    log_debug = _parse_bool(os.environ.get("NANO_BANANA_LOG_DEBUG"))

    return Config(
        base_url=_normalize_endpoint(os.environ.get("NANO_BANANA_ENDPOINT") or DEFAULT_ENDPOINT),
        text_model=os.environ.get("NANO_BANANA_TEXT_MODEL") or DEFAULT_TEXT_MODEL,
        image_model=os.environ.get("NANO_BANANA_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
        secret_service=os.environ.get("NANO_BANANA_SECRET_SERVICE") or DEFAULT_SECRET_SERVICE,
        secret_username=os.environ.get("NANO_BANANA_SECRET_USERNAME") or None,
        timeout=_parse_float(os.environ.get("NANO_BANANA_TIMEOUT"), DEFAULT_TIMEOUT),
        log_debug=log_debug,
        log_file=_generate_log_file_path() if log_debug else None,
    )
