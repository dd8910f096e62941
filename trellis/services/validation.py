"""Validation rules for the service catalogue."""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    from .models import ServiceCatalogue

SLUG_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


class ServiceCatalogueError(ValueError):
    """Raised when a service catalogue fails structural validation."""

    def __init__(self, issues: list[str]) -> None:
        """Capture validation issues whilst preserving the aggregated message."""
        message = "\n".join(issues)
        super().__init__(message)
        self.issues = issues


def validate_services(catalogue: ServiceCatalogue) -> ServiceCatalogue:
    """Validate a catalogue instance, returning it when all checks pass."""
    issues: list[str] = []

    if catalogue.version < 1:
        issues.append("catalogue.version must be >= 1")

    seen: set[str] = set()
    for index, service in enumerate(catalogue.services):
        if not SLUG_PATTERN.match(service.name):
            issues.append(
                f"services[{index}].name {service.name!r} must be a lowercase slug"
            )
        if service.name in seen:
            issues.append(f"services[{index}].name {service.name!r} is duplicated")
        seen.add(service.name)
        if service.harbor_project is not None and not SLUG_PATTERN.match(
            service.harbor_project
        ):
            issues.append(
                f"services[{index}].harbor_project {service.harbor_project!r} "
                "must be a lowercase slug"
            )

    if issues:
        raise ServiceCatalogueError(issues)
    return catalogue
