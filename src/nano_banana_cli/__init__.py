"""nano-banana-cli - Gemini 文本与图片生成命令行工具。

环境变量:
    GOOGLE_AI_STUDIO_API_KEY: API key
    NANO_BANANA_LOG_DEBUG: 日志输出到临时文件 (默认 false)

用法:
    nano-banana text "Explain base64 in one sentence"
    nano-banana image "A banana wearing sunglasses" -o banana.png
"""

__version__ = "0.1.0"

from .app import main

__all__ = ["__version__", "main"]
