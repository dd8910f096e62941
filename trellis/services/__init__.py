"""Service catalogue: the static list of services being provisioned.

Validate a catalogue file::

    >>> from trellis.services import load_services
    >>> catalogue = load_services("services.yaml")
    >>> catalogue.names
    ['billing-api', 'ledger']

"""

from __future__ import annotations

from .loader import DEFAULT_SERVICES_FILE, load_services, services_path
from .models import Service, ServiceCatalogue
from .validation import ServiceCatalogueError, validate_services

__all__ = [
    "DEFAULT_SERVICES_FILE",
    "Service",
    "ServiceCatalogue",
    "ServiceCatalogueError",
    "load_services",
    "services_path",
    "validate_services",
]
