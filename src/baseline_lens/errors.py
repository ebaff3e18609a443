"""Exception hierarchy and error classification.

Classifies per-file failures by category to enable:
- Structured error records in the analysis result
- Informative user messages (not found vs permission vs encoding)
- Log levels per category (timeouts and size limits are warnings)
"""

from __future__ import annotations

from enum import Enum


class BaselineLensError(Exception):
    """Base class for all errors raised by baseline-lens."""


class DiscoveryError(BaselineLensError):
    """File discovery failed at the project root. Fatal to a run."""


class ConfigError(BaselineLensError):
    """A project configuration file could not be loaded."""


class KnowledgeBaseError(BaselineLensError):
    """A compatibility data file could not be loaded."""


class FileAnalysisError(BaselineLensError):
    """A single file could not be analyzed. Never fatal to a run."""


class FileTooLargeError(FileAnalysisError):
    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(f"File too large: {size} bytes (max: {max_size})")
        self.size = size
        self.max_size = max_size


class AnalysisTimeoutError(FileAnalysisError):
    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"Analysis timeout after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    ENCODING = "encoding"
    FILE_TOO_LARGE = "file_too_large"
    TIMEOUT = "timeout"
    DETECTOR = "detector"  # raised while scanning or resolving
    UNKNOWN = "unknown"


def classify_error(error: BaseException) -> ErrorKind:
    """Classify a per-file failure.

    Checks exception types first, falls back to string matching for
    untyped exceptions.
    """
    # 1. Typed failures
    if isinstance(error, FileTooLargeError):
        return ErrorKind.FILE_TOO_LARGE
    if isinstance(error, (AnalysisTimeoutError, TimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(error, FileNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, PermissionError):
        return ErrorKind.PERMISSION_DENIED
    if isinstance(error, UnicodeDecodeError):
        return ErrorKind.ENCODING
    if isinstance(error, FileAnalysisError):
        return ErrorKind.DETECTOR

    # 2. Fall back to string matching
    msg = str(error).lower()

    if "timeout" in msg or "timed out" in msg:
        return ErrorKind.TIMEOUT
    if "no such file" in msg or "not found" in msg:
        return ErrorKind.NOT_FOUND
    if "permission" in msg or "access is denied" in msg:
        return ErrorKind.PERMISSION_DENIED
    if "codec" in msg or "encoding" in msg:
        return ErrorKind.ENCODING

    return ErrorKind.UNKNOWN


def describe_error(error: BaseException, file_path: str) -> str:
    """Render the user-facing message for a per-file failure."""
    kind = classify_error(error)
    if kind is ErrorKind.NOT_FOUND:
        return f"File not found: {file_path}"
    if kind is ErrorKind.PERMISSION_DENIED:
        return f"Permission denied: {file_path}"
    if kind is ErrorKind.ENCODING:
        return f"Invalid file encoding (not UTF-8): {file_path}"
    if isinstance(error, FileAnalysisError):
        return str(error)
    return f"Failed to analyze {file_path}: {error}"
