"""Vault HTTP API errors."""

from __future__ import annotations


class VaultAPIError(RuntimeError):
    """Raised when Vault returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(
        cls, status_code: int, path: str, errors: list[str] | None = None
    ) -> VaultAPIError:
        """Return an error for non-2xx HTTP responses."""
        message = f"Vault HTTP {status_code} for {path}"
        if errors:
            message = f"{message}: {'; '.join(errors)}"
        return cls(message, status_code=status_code)


class VaultResponseShapeError(RuntimeError):
    """Raised when Vault responses do not match the expected structure."""

    @classmethod
    def invalid(cls, path: str, reason: object) -> VaultResponseShapeError:
        """Return an error for a response body that failed to decode."""
        return cls(f"Vault response for {path} has unexpected shape: {reason}")


class VaultConfigError(RuntimeError):
    """Raised when Vault client configuration is invalid."""

    @classmethod
    def missing_address(cls) -> VaultConfigError:
        """Return an error when no Vault address is configured."""
        return cls("VAULT_ADDR is required for the Vault API")

    @classmethod
    def missing_token(cls) -> VaultConfigError:
        """Return an error when no Vault token is configured."""
        return cls("VAULT_TOKEN is required for the Vault API")


class VaultMountConflictError(RuntimeError):
    """Raised when a required mount path is taken by an incompatible engine."""

    @classmethod
    def occupied(cls, path: str, found: str) -> VaultMountConflictError:
        """Return an error for a mount path already used by ``found``."""
        return cls(f"Vault path {path}/ is already mounted as {found}")
