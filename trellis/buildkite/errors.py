"""Buildkite REST client errors."""

from __future__ import annotations


class BuildkiteAPIError(RuntimeError):
    """Raised when Buildkite returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(
        cls, status_code: int, path: str, detail: str | None = None
    ) -> BuildkiteAPIError:
        """Return an error for non-2xx HTTP responses."""
        message = f"Buildkite HTTP {status_code} for {path}"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, status_code=status_code)


class PipelineExistsError(BuildkiteAPIError):
    """Raised when a create request collides with an existing pipeline."""

    def __init__(self, slug: str, *, status_code: int | None = None) -> None:
        """Initialise with the conflicting pipeline slug."""
        self.slug = slug
        super().__init__(
            f"Buildkite pipeline already exists: {slug}", status_code=status_code
        )


class BuildkiteResponseShapeError(RuntimeError):
    """Raised when Buildkite responses do not match the expected structure."""

    @classmethod
    def invalid(cls, path: str, reason: object) -> BuildkiteResponseShapeError:
        """Return an error for a response body that failed to decode."""
        return cls(f"Buildkite response for {path} has unexpected shape: {reason}")


class BuildkiteConfigError(RuntimeError):
    """Raised when Buildkite client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> BuildkiteConfigError:
        """Return an error when no API token is configured."""
        return cls("TRELLIS_BUILDKITE_TOKEN is required for the Buildkite API")

    @classmethod
    def missing_org(cls) -> BuildkiteConfigError:
        """Return an error when no organisation slug is configured."""
        return cls("TRELLIS_BUILDKITE_ORG is required for the Buildkite API")
