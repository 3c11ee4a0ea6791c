"""nano-banana-cli 命令行入口。

子命令:
    text <prompt>                      生成文本并打印到 stdout
    image <prompt> [-o/--output PATH]  生成图片并写入文件（默认 output.png）

退出码:
    0   成功
    1   任何生成失败（错误信息输出到 stderr）
    130 被 Ctrl+C 中断
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Sequence, TextIO

from . import __version__
from .config import API_KEY_ENV, Config, load_config
from .gemini import (
    GeminiClient,
    GenerationOutcome,
    GenerationRequest,
    ImageResult,
    Modality,
    NoImageReturnedError,
    ProviderError,
)

__all__ = ["build_parser", "configure_logging", "report_outcome", "run", "main"]

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "output.png"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nano-banana",
        description="CLI for Google Gemini text and image generation.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--api-key",
        default=None,
        help=f"API key (defaults to {API_KEY_ENV}, then the system keyring).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    text_parser = subparsers.add_parser("text", help="Generate text using Gemini")
    text_parser.add_argument("prompt", help="The prompt to send to the model")

    image_parser = subparsers.add_parser("image", help="Generate an image")
    image_parser.add_argument("prompt", help="The prompt describing the image to generate")
    image_parser.add_argument(
        "-o",
        "--output",
        default=DEFAULT_OUTPUT,
        help=f"Output file path (default: {DEFAULT_OUTPUT})",
    )

    return parser


def configure_logging(config: Config) -> None:
    """配置日志输出。

    默认输出到 stderr，只显示 WARNING 及以上；
    NANO_BANANA_LOG_DEBUG 开启时输出 DEBUG 日志到临时文件。
    """
    handlers: list[logging.Handler] = []

    if config.log_debug and config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)
        log_level = logging.DEBUG
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(stderr_handler)
        log_level = logging.WARNING

    # root logger（第三方库）保持 WARNING，减少噪音
    logging.basicConfig(level=logging.WARNING, handlers=handlers)
    logging.getLogger("nano_banana_cli").setLevel(log_level)

    if config.log_debug and config.log_file:
        print(f"Debug log: {config.log_file}", file=sys.stderr)


def _to_request(args: argparse.Namespace) -> GenerationRequest:
    if args.command == "image":
        return GenerationRequest(Modality.IMAGE, args.prompt, output_path=args.output)
    return GenerationRequest(Modality.TEXT, args.prompt)


def report_outcome(
    outcome: GenerationOutcome,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """将结果映射为用户可见输出与退出码。"""
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    if outcome.success:
        if isinstance(outcome.result, ImageResult):
            print(f"Image saved to: {outcome.output_path}", file=stdout)
            print(f"Mime type: {outcome.result.mime_type}", file=stdout)
        return 0

    error = outcome.error
    print(f"Error: {error}", file=stderr)

    if isinstance(error, NoImageReturnedError) and error.accompanying_text:
        print("Model response:", file=stderr)
        print(error.accompanying_text, file=stderr)
    elif isinstance(error, ProviderError) and error.retriable:
        print("The service is busy or rate limited. Wait and try again later.", file=stderr)

    return 1


async def run(args: argparse.Namespace, config: Config) -> int:
    """执行一次生成并返回退出码。"""
    client = GeminiClient(config)
    outcome = await client.generate(_to_request(args), explicit_key=args.api_key)
    return report_outcome(outcome)


def main(argv: Sequence[str] | None = None) -> None:
    """主入口点。"""
    args = build_parser().parse_args(argv)
    config = load_config()
    configure_logging(config)

    try:
        exit_code = asyncio.run(run(args, config))
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        sys.exit(130)  # 128 + SIGINT(2) = 130

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
