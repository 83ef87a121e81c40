"""Exceptions raised by the tracking core."""

from typing import Optional


class TrackingError(Exception):
    """Base class for all tracking errors."""


class ConfigError(TrackingError):
    """Configuration file could not be loaded."""


class InvalidIDError(TrackingError):
    """Identifier text is not an integer."""

    def __init__(self, id_text: str):
        self.id_text = id_text
        super().__init__(f"invalid ID format: {id_text}")


class NotFoundError(TrackingError):
    """Identity is absent from the unified list."""

    def __init__(self, media_id: int):
        self.media_id = media_id
        super().__init__(f"anime with ID {media_id} not found")


class UnsupportedConversionError(TrackingError):
    """Backend name pair cannot be translated."""

    def __init__(self, from_backend: str, to_backend: str):
        self.from_backend = from_backend
        self.to_backend = to_backend
        super().__init__(f"unsupported service conversion: {from_backend} to {to_backend}")


class ValidationError(TrackingError):
    """User input is out of range."""


class BackendRequestError(TrackingError):
    """A backend returned a non-success response or could not be reached."""

    def __init__(
        self,
        backend: str,
        message: str,
        http_status: Optional[int] = None,
        body: str = "",
    ):
        self.backend = backend
        self.http_status = http_status
        self.body = body
        detail = message
        if http_status is not None:
            detail = f"{message}. Status Code: {http_status}, Response: {body}"
        super().__init__(detail)


class AuthError(BackendRequestError):
    """Token is invalid or expired."""


class PartialDualWriteError(TrackingError):
    """One or more backends failed during a dual write.

    ``failures`` is an ordered list of ``(backend_label, error)`` pairs.
    """

    def __init__(self, failures: list[tuple[str, Exception]], result=None):
        self.failures = failures
        self.result = result
        joined = "; ".join(f"{label}: {error}" for label, error in failures)
        super().__init__(f"dual tracking errors: {joined}")
