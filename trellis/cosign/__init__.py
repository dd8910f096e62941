"""Cosign signing keys generated per service and stored in Vault."""

from __future__ import annotations

from .keys import (
    CosignError,
    CosignKeyPair,
    CosignKeyProvisioner,
    CosignKeysConfig,
    ExecutableNotFoundError,
    cosign_secret_path,
    generate_key_pair,
    generate_password,
    require_exe,
)

__all__ = [
    "CosignError",
    "CosignKeyPair",
    "CosignKeyProvisioner",
    "CosignKeysConfig",
    "ExecutableNotFoundError",
    "cosign_secret_path",
    "generate_key_pair",
    "generate_password",
    "require_exe",
]
