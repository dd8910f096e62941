"""GitHub REST client errors."""

from __future__ import annotations


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(
        cls, status_code: int, path: str, detail: str | None = None
    ) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        message = f"GitHub HTTP {status_code} for {path}"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, status_code=status_code)


class GitHubResponseShapeError(RuntimeError):
    """Raised when GitHub responses do not match the expected structure."""

    @classmethod
    def invalid(cls, path: str, reason: object) -> GitHubResponseShapeError:
        """Return an error for a response body that failed to decode."""
        return cls(f"GitHub response for {path} has unexpected shape: {reason}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("TRELLIS_GITHUB_TOKEN is required for the GitHub API")

    @classmethod
    def missing_org(cls) -> GitHubConfigError:
        """Return an error when no GitHub organisation is configured."""
        return cls("TRELLIS_GITHUB_ORG is required for repository listing")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
