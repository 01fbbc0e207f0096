"""Layered error types for gh-demo operations.

Every failure raised by the API client, the content loaders and the
orchestrator is a ``LayeredError`` tagged with the layer it came from and the
operation that failed, so callers can classify errors without parsing
messages:

    [api:create_issue] failed to create GitHub issue: GraphQL query failed: ...

Batch operations reduce their per-item failures through ``ErrorCollector``.
"""

from __future__ import annotations

from enum import Enum


class ErrorLayer(str, Enum):
    """Origin layer of a LayeredError."""

    API = "api"
    VALIDATION = "validation"
    FILE = "file"
    CONFIG = "config"
    PROJECT = "project"
    CONTEXT = "context"


class LayeredError(Exception):
    """Error tagged with an origin layer, an operation name and diagnostic context."""

    def __init__(
        self,
        layer: ErrorLayer | str,
        operation: str,
        message: str,
        cause: BaseException | None = None,
        context: dict[str, str] | None = None,
    ) -> None:
        self.layer = ErrorLayer(layer)
        self.operation = operation
        self.message = message
        self.cause = cause
        self.context: dict[str, str] = dict(context or {})
        super().__init__(str(self))
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        prefix = f"[{self.layer.value}:{self.operation}] {self.message}"
        if self.cause is not None:
            return f"{prefix}: {self.cause}"
        return prefix

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(layer={self.layer.value!r}, operation={self.operation!r}, "
            f"message={self.message!r}, context={self.context!r})"
        )

    def with_context(self, key: str, value: object) -> LayeredError:
        """Attach a diagnostic key/value pair and return self for chaining."""
        self.context[key] = str(value)
        return self

    def unwrap(self) -> BaseException | None:
        return self.cause


class NotFoundError(LayeredError):
    """A lookup succeeded but the requested object does not exist.

    Kept distinct from transport failures: some callers skip missing labels or
    users while a missing discussion category is fatal.
    """

    def __init__(self, operation: str, kind: str, name: str, context: dict[str, str] | None = None) -> None:
        super().__init__(
            layer=ErrorLayer.VALIDATION,
            operation=operation,
            message=f"{kind} '{name}' not found",
            context=context,
        )
        self.kind = kind
        self.name = name
        self.context.setdefault("kind", kind)
        self.context.setdefault("name", name)


class PartialFailureError(Exception):
    """Several items of a batch failed. Holds each failure's rendered message in order."""

    HEADER = "some items failed to create"

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.HEADER}:\n  - " + "\n  - ".join(self.errors)


class ItemError(Exception):
    """Failure of one item in a batch, rendered as ``<Kind> <n> (<title>): <error>``.

    ``n`` is 1-based. The original error stays reachable as ``error`` and ``__cause__``.
    """

    def __init__(self, kind: str, index: int, title: str, error: BaseException) -> None:
        self.kind = kind
        self.index = index
        self.title = title
        self.error = error
        super().__init__(str(self))
        self.__cause__ = error

    def __str__(self) -> str:
        return f"{self.kind} {self.index + 1} ({self.title}): {self.error}"


class ErrorCollector:
    """Collect per-item errors of a batch and reduce them to a single result.

    ``result()`` returns ``None`` when nothing failed, the original exception
    when exactly one item failed, and a ``PartialFailureError`` otherwise.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._errors: list[BaseException] = []

    def add(self, error: BaseException | None) -> None:
        if error is not None:
            self._errors.append(error)

    @property
    def errors(self) -> list[BaseException]:
        return list(self._errors)

    def has_errors(self) -> bool:
        return bool(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def result(self) -> BaseException | None:
        if not self._errors:
            return None

        if len(self._errors) == 1:
            return self._errors[0]

        return PartialFailureError([str(err) for err in self._errors])


class NoApiTokenError(Exception):
    """Raised when no API token is available for GitHub API operations."""

    pass


def api_error(operation: str, message: str, cause: BaseException | None = None) -> LayeredError:
    return LayeredError(ErrorLayer.API, operation, message, cause)


def validation_error(operation: str, message: str) -> LayeredError:
    return LayeredError(ErrorLayer.VALIDATION, operation, message)


def file_error(operation: str, message: str, cause: BaseException | None = None) -> LayeredError:
    return LayeredError(ErrorLayer.FILE, operation, message, cause)


def config_error(operation: str, message: str, cause: BaseException | None = None) -> LayeredError:
    return LayeredError(ErrorLayer.CONFIG, operation, message, cause)


def project_error(operation: str, message: str, cause: BaseException | None = None) -> LayeredError:
    return LayeredError(ErrorLayer.PROJECT, operation, message, cause)


def project_permission_error(operation: str, message: str, cause: BaseException | None = None) -> LayeredError:
    return project_error(operation, message, cause).with_context("type", "permission")


def context_error(operation: str, cancelled: bool, cause: BaseException | None = None) -> LayeredError:
    """Build the context-layer error for a cancelled or expired operation."""
    if cancelled:
        message = "operation was cancelled (interrupted by user)"
    else:
        message = "operation timed out (deadline exceeded)"
    return LayeredError(ErrorLayer.CONTEXT, operation, message, cause)


def wrap_with_operation(
    error: BaseException | None, layer: ErrorLayer | str, operation: str, message: str
) -> LayeredError | None:
    if error is None:
        return None
    return LayeredError(layer, operation, message, error)


def with_context_safe(error: BaseException | None, key: str, value: object) -> BaseException | None:
    """Attach context when ``error`` is a LayeredError, return any other error unchanged."""
    if isinstance(error, LayeredError):
        return error.with_context(key, value)
    return error


def as_layered_error(error: BaseException | None) -> LayeredError | None:
    """Return the first LayeredError found walking the cause chain of ``error``."""
    seen: set[int] = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, LayeredError):
            return error
        seen.add(id(error))
        error = error.__cause__
    return None


def is_layer(error: BaseException | None, layer: ErrorLayer | str) -> bool:
    layered = as_layered_error(error)
    return layered is not None and layered.layer == ErrorLayer(layer)


def is_project_permission_error(error: BaseException | None) -> bool:
    layered = as_layered_error(error)
    return (
        layered is not None and layered.layer == ErrorLayer.PROJECT and layered.context.get("type") == "permission"
    )


def is_operation(error: BaseException | None, operation: str) -> bool:
    layered = as_layered_error(error)
    return layered is not None and layered.operation == operation


def is_context_error(error: BaseException | None) -> bool:
    return is_layer(error, ErrorLayer.CONTEXT)
