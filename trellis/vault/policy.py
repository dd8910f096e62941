"""Render the HCL ACL policies granted to services and to CI.

Policies are rendered deterministically so that comparing the rendered text
with what Vault returns detects drift without false positives.

Usage
-----
>>> print(service_policy("billing-api", "secret"), end="")
path "secret/data/services/billing-api/*" {
  capabilities = ["read"]
}
<BLANKLINE>
path "secret/metadata/services/billing-api/*" {
  capabilities = ["read", "list"]
}

"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

CI_POLICY_NAME = "ci-services"
SERVICE_POLICY_PREFIX = "svc-"


def service_policy_name(service: str) -> str:
    """Return the Vault policy name for ``service``."""
    return f"{SERVICE_POLICY_PREFIX}{service}"


def _path_block(path: str, capabilities: cabc.Sequence[str]) -> str:
    caps = ", ".join(f'"{cap}"' for cap in capabilities)
    return f'path "{path}" {{\n  capabilities = [{caps}]\n}}\n'


def _service_blocks(service: str, mount: str) -> list[str]:
    return [
        _path_block(f"{mount}/data/services/{service}/*", ["read"]),
        _path_block(f"{mount}/metadata/services/{service}/*", ["read", "list"]),
    ]


def service_policy(service: str, mount: str) -> str:
    """Return the policy granting read access to one service's secrets."""
    return "\n".join(_service_blocks(service, mount))


def ci_policy(services: cabc.Iterable[str], mount: str) -> str:
    """Return one policy granting read access to every listed service.

    Blocks follow the iteration order of ``services``.
    """
    blocks = [block for name in services for block in _service_blocks(name, mount)]
    return "\n".join(blocks)


def normalise_policy(text: str | None) -> str:
    """Normalise policy text for comparison (line endings, outer whitespace)."""
    if text is None:
        return ""
    return text.replace("\r\n", "\n").strip()
