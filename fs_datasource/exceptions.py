"""
Custom exception hierarchy for fs-datasource.

Why a custom hierarchy:
- Callers can catch specific exceptions (e.g., NotFoundError vs
  FormatError) without relying on generic ValueError/RuntimeError.
- Errors raised by third-party libraries (requests, pyarrow, pandas)
  are wrapped so the query layer only has to know about this module.
"""


class FsDatasourceError(Exception):
    """Base exception for all fs-datasource errors."""


class FetchError(FsDatasourceError):
    """Raised when a backend cannot retrieve content (network or IO failure).

    ``request_failed`` is True when no response was received at all
    (connection refused, DNS failure, timeout), as opposed to the
    backend answering with an error status.
    """

    def __init__(self, message: str, *, request_failed: bool = False) -> None:
        super().__init__(message)
        self.request_failed = request_failed


class NotFoundError(FetchError):
    """Raised when the requested path does not exist on the backend."""


class FormatError(FsDatasourceError):
    """Raised when a payload cannot be parsed by the selected format parser.

    For example malformed JSON, a JSON document of an unrecognised shape,
    or a corrupt Parquet/Arrow container.
    """


class TransformError(FsDatasourceError):
    """Raised when the changes transform cannot find its key/value columns."""


class UnsupportedBackendError(FsDatasourceError):
    """Raised by the placeholder backend built for an unknown ``type``."""


class ConfigValidationError(FsDatasourceError):
    """Raised when a settings file is empty or structurally unusable."""
