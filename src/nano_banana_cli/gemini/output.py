"""结果输出。

nano-banana-cli gemini v0.1.0

文本写到 stdout；图片先写入同目录下的临时文件，完整写入并 fsync 后
再 os.replace 到目标路径。中途中断（KeyboardInterrupt、任务取消）时
删除临时文件，目标路径保持原状，不会留下空文件或截断文件。
"""

from __future__ import annotations

import logging
import mimetypes
import os
import sys
import tempfile
from pathlib import Path
from typing import TextIO

from .errors import InvalidRequestError, OutputError
from .types import GenerationRequest, GenerationResult, ImageResult, TextResult

__all__ = [
    "write_atomic",
    "get_mime_type",
    "OutputSink",
]

logger = logging.getLogger(__name__)

EXT_MAP = {"image/png": ".png", "image/jpeg": ".jpg", "image/webp": ".webp"}


def get_mime_type(file_path: str | Path) -> str | None:
    """根据文件扩展名推断 MIME 类型。"""
    mime_type, _ = mimetypes.guess_type(str(file_path))
    return mime_type


def _default_file_mode() -> int:
    """按当前 umask 计算新文件权限（与普通 open() 创建的文件一致）。"""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(path: str | Path, data: bytes) -> Path:
    """原子写入文件。

    mkstemp 创建的临时文件权限为 0600，替换前改为 umask 对应的权限。

    Args:
        path: 目标路径
        data: 文件内容

    Returns:
        目标文件的绝对路径
    """
    target = Path(path).expanduser().absolute()
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".part",
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, _default_file_mode())
        os.replace(tmp_path, target)
    except BaseException:
        # 包括 KeyboardInterrupt / CancelledError：清理临时文件后继续抛出
        tmp_path.unlink(missing_ok=True)
        raise

    return target


class OutputSink:
    """将生成结果写到 stdout 或文件。"""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def deliver(self, result: GenerationResult, request: GenerationRequest) -> str:
        """输出结果。

        Returns:
            图片落盘的绝对路径；文本结果返回空字符串
        """
        if isinstance(result, TextResult):
            print(result.content, file=self.stream)
            return ""

        if isinstance(result, ImageResult):
            if not request.output_path:
                raise InvalidRequestError("Image generation requires an output path")
            self._check_extension(request.output_path, result.mime_type)
            try:
                target = write_atomic(request.output_path, result.data)
            except OSError as e:
                raise OutputError(request.output_path, e) from e
            logger.debug(f"Wrote {len(result.data)} bytes to {target}")
            return str(target)

        raise TypeError(f"Unsupported result type: {type(result).__name__}")

    def _check_extension(self, output_path: str, mime_type: str) -> None:
        guessed = get_mime_type(output_path)
        if guessed and guessed != mime_type:
            expected = EXT_MAP.get(mime_type, "")
            logger.warning(
                f"Output path {output_path} does not match returned type {mime_type}"
                + (f" (expected {expected})" if expected else "")
            )
