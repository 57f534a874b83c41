"""Central application exception hierarchy.

This module defines the base application exception ``AppError`` and the
specialized subclasses used throughout the book toolkit: configuration
problems, data that fails validation (including missing columns), models
that cannot be fitted, chapter chunks that fail during rendering and
malformed exercise definitions. Student mistakes inside an exercise are
*not* errors; they are reported as failed checks.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'DATA_VALIDATION_ERROR'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.
    transient : bool, optional
        Whether the error is temporary and may be retried.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'})
    >>> e.code
    'CODE'
    >>> str(e)
    'CODE: message'
    """

    __slots__ = ("code", "message", "context", "transient")

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})
        self.transient = bool(transient)

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
            "is_transient": self.transient,
        }


class ConfigurationError(AppError):
    """Raised for invalid or missing configuration."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "CONFIGURATION_ERROR", message, context=context, transient=False
        )


class DataValidationError(AppError):
    """Raised for data that fails schema or content validation."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "DATA_VALIDATION_ERROR", message, context=context, transient=False
        )


class MissingColumnError(DataValidationError):
    """Raised when columns referenced by a verb, model or plot do not exist.

    Parameters
    ----------
    missing : Iterable[str]
        Names of the columns that were requested but are absent.
    available : Iterable[str]
        Names of the columns the data frame actually has.
    """

    def __init__(self, missing: Iterable[str], available: Iterable[str]) -> None:
        self.missing = list(missing)
        self.available = list(available)
        super().__init__(
            f"Column(s) not found: {', '.join(self.missing)}",
            context={"missing": self.missing, "available": self.available},
        )


class ModelFitError(AppError):
    """Raised when a regression model cannot be fitted or inverted."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("MODEL_FIT_ERROR", message, context=context, transient=False)


class ChunkExecutionError(AppError):
    """Raised when a code chunk fails while a chapter is being rendered.

    Parameters
    ----------
    chapter : str
        Slug of the chapter containing the failing chunk.
    line : int
        1-based line number of the chunk's opening fence.
    cause : BaseException
        The exception raised by the chunk's code.
    """

    def __init__(self, chapter: str, line: int, cause: BaseException) -> None:
        self.chapter = chapter
        self.line = line
        super().__init__(
            "CHUNK_EXECUTION_ERROR",
            f"{chapter}:{line}: {type(cause).__name__}: {cause}",
            context={"chapter": chapter, "line": line},
            transient=False,
        )


class ExerciseCheckError(AppError):
    """Raised for malformed exercise definitions (not for failing students)."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "EXERCISE_CHECK_ERROR", message, context=context, transient=False
        )
