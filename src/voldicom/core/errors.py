"""Error taxonomy and the pass/fail outcome returned by the public API."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class CodecError(Exception):
    """Base class for every failure raised inside the codec."""

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None


class FileNotFoundOrUnreadable(CodecError):
    """The path does not exist or could not be parsed as DICOM."""


class MalformedMetadata(CodecError):
    """A required tag is missing or cannot be parsed."""


class UnsupportedImageType(CodecError):
    """Color data, an unsupported channel count, or a too-deep bit depth."""


class InvalidGeometry(CodecError):
    """Non-positive spacing or a dimension below 1."""


class SeriesMismatch(CodecError):
    """Two files in one directory belong to different series."""

    def __init__(self, first: Path, other: Path):
        super().__init__(
            f"file {other} is from a different series than file {first}",
            path=other,
        )
        self.first = Path(first)
        self.other = Path(other)


class DimensionMismatch(CodecError):
    """Two files in one directory disagree on nx, ny or nc."""

    def __init__(
        self,
        first: Path,
        first_dims: tuple[int, int, int],
        other: Path,
        other_dims: tuple[int, int, int],
    ):
        ox, oy, oc = other_dims
        fx, fy, fc = first_dims
        super().__init__(
            f"slice {other} ({ox}x, {oy}y, {oc}c) does not match the "
            f"dimensions of slice {first} ({fx}x, {fy}y, {fc}c)",
            path=other,
        )
        self.first = Path(first)
        self.other = Path(other)
        self.first_dims = first_dims
        self.other_dims = other_dims


class NegativeSample(CodecError):
    """A voxel below zero cannot be quantized to unsigned samples."""


class IOWriteFailure(CodecError):
    """A dataset field could not be set or the file could not be saved."""


class AllocationFailure(CodecError):
    """A volume could not be resized to the requested dimensions."""


@dataclass(frozen=True)
class CodecResult:
    """Single pass/fail outcome of a public codec operation."""

    ok: bool
    error: CodecError | None = None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""

    def __bool__(self) -> bool:
        return self.ok


SUCCESS = CodecResult(ok=True)


def codec_boundary(func: Callable[..., None]) -> Callable[..., CodecResult]:
    """Convert anything raised by *func* into a failed CodecResult.

    The wrapped function signals success by returning normally and its own
    return value is discarded: callers always receive a CodecResult. Each
    failure is logged once, tagged with the operation name.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> CodecResult:
        try:
            func(*args, **kwargs)
        except CodecError as e:
            logger.error(f"{func.__name__}: {e.message}")
            return CodecResult(ok=False, error=e)
        except Exception as e:
            logger.error(f"{func.__name__}: unexpected exception ({e})")
            return CodecResult(ok=False, error=CodecError(str(e)))
        return SUCCESS

    return wrapper
