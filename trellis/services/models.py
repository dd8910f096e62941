"""Typed service catalogue structures."""

from __future__ import annotations

import msgspec


class Service(msgspec.Struct, kw_only=True, frozen=True):
    """A named service that receives secrets and CI configuration.

    Attributes
    ----------
    name : str
        Lowercase slug identifying the service.
    harbor_project : str, optional
        Harbor project name; defaults to ``name``.
    policies : list[str]
        Extra Vault policies attached to the service's AppRole.

    """

    name: str
    harbor_project: str | None = None
    policies: list[str] = msgspec.field(default_factory=list)

    @property
    def project(self) -> str:
        """Return the Harbor project for the service."""
        return self.harbor_project or self.name


class ServiceCatalogue(msgspec.Struct, kw_only=True, frozen=True):
    """Root document of a service catalogue file."""

    version: int
    services: list[Service] = msgspec.field(default_factory=list)

    @property
    def names(self) -> list[str]:
        """Return service names in catalogue order."""
        return [service.name for service in self.services]
