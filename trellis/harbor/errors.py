"""Harbor HTTP API errors."""

from __future__ import annotations


class HarborAPIError(RuntimeError):
    """Raised when Harbor returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(
        cls, status_code: int, path: str, detail: str | None = None
    ) -> HarborAPIError:
        """Return an error for non-2xx HTTP responses."""
        message = f"Harbor HTTP {status_code} for {path}"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, status_code=status_code)


class HarborConflictError(HarborAPIError):
    """Raised when Harbor reports that a resource already exists (HTTP 409)."""

    @classmethod
    def exists(cls, kind: str, name: str) -> HarborConflictError:
        """Return an error for an already existing ``kind`` named ``name``."""
        return cls(f"Harbor {kind} {name} already exists", status_code=409)


class HarborResponseShapeError(RuntimeError):
    """Raised when Harbor responses do not match the expected structure."""

    @classmethod
    def invalid(cls, path: str, reason: object) -> HarborResponseShapeError:
        """Return an error for a response body that failed to decode."""
        return cls(f"Harbor response for {path} has unexpected shape: {reason}")


class HarborConfigError(RuntimeError):
    """Raised when Harbor client configuration is invalid."""

    @classmethod
    def missing(cls, variable: str) -> HarborConfigError:
        """Return an error for a required environment variable that is unset."""
        return cls(f"{variable} is required for the Harbor API")
