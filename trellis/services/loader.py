"""Locate and load the service catalogue file.

The catalogue path comes from the caller, then ``TRELLIS_SERVICES_FILE``, then
``services.yaml`` in the working directory. Every issue is reported against
the file it came from so CI logs point at the right catalogue.
"""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from trellis.common.env import env_str
from trellis.logging import get_logger, log_warning

from .models import ServiceCatalogue
from .validation import ServiceCatalogueError, validate_services

logger = get_logger(__name__)

YAML_VERSION = (1, 2)
SERVICES_FILE_ENV = "TRELLIS_SERVICES_FILE"
DEFAULT_SERVICES_FILE = Path("services.yaml")


def services_path(path: Path | str | None = None) -> Path:
    """Return the catalogue path to use.

    Examples
    --------
    >>> services_path("ci/services.yaml").name
    'services.yaml'

    """
    if path is not None:
        return Path(path)
    configured = env_str(SERVICES_FILE_ENV)
    return Path(configured) if configured else DEFAULT_SERVICES_FILE


def load_services(path: Path | str | None = None) -> ServiceCatalogue:
    """Parse and validate the YAML service catalogue.

    Raises
    ------
    ServiceCatalogueError
        If the file cannot be read or parsed, or fails validation. Issues are
        prefixed with the catalogue path.

    """
    path_obj = services_path(path)

    try:
        loaded = _yaml().load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise _error(path_obj, [f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise _error(path_obj, ["service catalogue file is empty"])

    try:
        catalogue = validate_services(msgspec.convert(loaded, type=ServiceCatalogue))
    except msgspec.ValidationError as exc:
        raise _error(path_obj, [f"schema validation failed: {exc}"]) from exc
    except ServiceCatalogueError as exc:
        raise _error(path_obj, exc.issues) from exc

    if not catalogue.services:
        log_warning(logger, "Service catalogue %s lists no services", path_obj)
    return catalogue


def _error(path: Path, issues: list[str]) -> ServiceCatalogueError:
    return ServiceCatalogueError([f"{path}: {issue}" for issue in issues])


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
