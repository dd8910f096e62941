"""Command line entry point for the trellis provisioning scripts.

Usage:
    trellis pipelines-sync            # Reconcile Buildkite pipelines with GitHub
    trellis vault-bootstrap           # Policies and AppRoles for every service
    trellis harbor-bootstrap          # Harbor projects and CI robot accounts
    trellis cosign-keys               # Cosign key pairs stored in Vault
    trellis validate-services         # Check the service catalogue file

Every command reads its connection settings from the environment (see
``TRELLIS_*``, ``VAULT_*`` and ``HARBOR_*``); flags override the environment.
Configuration errors exit with status 2 before any network call is made.
"""

from __future__ import annotations

import dataclasses as dc
import sys
import typing as typ
from pathlib import Path

import httpx
from cyclopts import App, Parameter

from trellis import __version__
from trellis.buildkite import BuildkiteClient, BuildkiteConfig, BuildkiteConfigError
from trellis.common.env import EnvVarError
from trellis.common.outcomes import summary_lines
from trellis.cosign import CosignKeyProvisioner, CosignKeysConfig
from trellis.github import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubRestClient,
    GitHubRestConfig,
)
from trellis.harbor import (
    HarborBootstrapConfig,
    HarborBootstrapper,
    HarborClient,
    HarborConfig,
    HarborConfigError,
)
from trellis.logging import configure_logging, get_logger, log_exception, log_warning
from trellis.pipelines import PipelineSyncConfig, sync_pipelines
from trellis.services import ServiceCatalogue, ServiceCatalogueError, load_services
from trellis.vault import (
    VaultAPIError,
    VaultBootstrapConfig,
    VaultBootstrapper,
    VaultClient,
    VaultConfig,
    VaultConfigError,
    VaultMountConflictError,
    VaultResponseShapeError,
)

if typ.TYPE_CHECKING:
    from trellis.common.outcomes import ProvisionResult

logger = get_logger(__name__)

app = App(
    name="trellis",
    help="Provisioning scripts for CI infrastructure",
    version=__version__,
)

EXIT_CONFIG_ERROR = 2

_CONFIG_ERRORS = (
    BuildkiteConfigError,
    EnvVarError,
    GitHubConfigError,
    HarborConfigError,
    VaultConfigError,
)
_VAULT_ERRORS = (
    VaultAPIError,
    VaultMountConflictError,
    VaultResponseShapeError,
    httpx.HTTPError,
)


def _start(log_level: str) -> None:
    normalized, invalid = configure_logging(log_level)
    if invalid:
        log_warning(logger, "Invalid log level %r; using %s", log_level, normalized)


def _config_failure(exc: Exception) -> int:
    print(f"configuration error: {exc}", file=sys.stderr)
    return EXIT_CONFIG_ERROR


def _load_catalogue(path: Path | None) -> ServiceCatalogue | None:
    try:
        return load_services(path)
    except ServiceCatalogueError as exc:
        print("invalid service catalogue:", file=sys.stderr)
        for issue in exc.issues:
            print(f"  - {issue}", file=sys.stderr)
        return None


def _print_result(result: ProvisionResult) -> int:
    for step in result.steps:
        print(f"{step.service}: {step.describe()}")
    for line in summary_lines(result.counts()):
        print(line)
    return 1 if result.failed else 0


@app.command
def pipelines_sync(
    *,
    github_org: typ.Annotated[
        str | None, Parameter(env_var="TRELLIS_GITHUB_ORG")
    ] = None,
    report_dir: Path | None = None,
    dry_run: bool = False,
    log_level: typ.Annotated[str, Parameter(env_var="TRELLIS_LOG_LEVEL")] = "INFO",
) -> int:
    """Reconcile Buildkite pipelines with the organisation's GitHub repositories.

    Prints one line per repository and a count summary, then writes CSV and
    JSON reports.

    Args:
        github_org: GitHub organisation to scan.
        report_dir: Directory for the report files.
        dry_run: Record intended creates and updates without writing.
        log_level: Logging level.

    Returns:
        0 when every repository succeeded, 1 when any failed or the listing
        failed, 2 on configuration errors.

    """
    _start(log_level)
    try:
        config = PipelineSyncConfig.from_env(github_org=github_org)
        github_config = GitHubRestConfig.from_env()
        buildkite_config = BuildkiteConfig.from_env()
    except _CONFIG_ERRORS as exc:
        return _config_failure(exc)

    if dry_run:
        config = dc.replace(config, dry_run=True)
    if report_dir is not None:
        config = dc.replace(config, report_dir=report_dir)

    with (
        GitHubRestClient(github_config) as github,
        BuildkiteClient(buildkite_config) as buildkite,
    ):
        try:
            outcome = sync_pipelines(
                config, lister=github, contents=github, pipelines=buildkite
            )
        except (GitHubAPIError, GitHubResponseShapeError, httpx.HTTPError) as exc:
            log_exception(logger, "Pipeline sync aborted", exc)
            print(f"pipeline sync aborted: {exc}", file=sys.stderr)
            return 1
    return outcome.exit_code


@app.command
def vault_bootstrap(
    *,
    services: Path | None = None,
    dry_run: bool = False,
    log_level: typ.Annotated[str, Parameter(env_var="TRELLIS_LOG_LEVEL")] = "INFO",
) -> int:
    """Ensure Vault namespace, KV mount, policies, and per-service AppRoles.

    Args:
        services: Service catalogue file; defaults to ``TRELLIS_SERVICES_FILE``
            or ``services.yaml``.
        dry_run: Record intended changes without writing.
        log_level: Logging level.

    Returns:
        0 on success, 1 when any step failed, 2 on configuration errors.

    """
    _start(log_level)
    try:
        vault_config = VaultConfig.from_env()
        config = VaultBootstrapConfig.from_env()
    except _CONFIG_ERRORS as exc:
        return _config_failure(exc)
    catalogue = _load_catalogue(services)
    if catalogue is None:
        return EXIT_CONFIG_ERROR
    if dry_run:
        config = dc.replace(config, dry_run=True)

    with VaultClient(vault_config) as client:
        try:
            result = VaultBootstrapper(client, config).run(catalogue)
        except _VAULT_ERRORS as exc:
            log_exception(logger, "Vault bootstrap aborted", exc)
            print(f"vault bootstrap aborted: {exc}", file=sys.stderr)
            return 1
    return _print_result(result)


@app.command
def harbor_bootstrap(
    *,
    services: Path | None = None,
    dry_run: bool = False,
    log_level: typ.Annotated[str, Parameter(env_var="TRELLIS_LOG_LEVEL")] = "INFO",
) -> int:
    """Ensure Harbor projects and CI robots; store new robot secrets in Vault.

    Args:
        services: Service catalogue file; defaults to ``TRELLIS_SERVICES_FILE``
            or ``services.yaml``.
        dry_run: Record intended changes without writing.
        log_level: Logging level.

    Returns:
        0 on success, 1 when any service failed, 2 on configuration errors.

    """
    _start(log_level)
    try:
        harbor_config = HarborConfig.from_env()
        vault_config = VaultConfig.from_env()
        config = HarborBootstrapConfig.from_env()
    except _CONFIG_ERRORS as exc:
        return _config_failure(exc)
    catalogue = _load_catalogue(services)
    if catalogue is None:
        return EXIT_CONFIG_ERROR
    if dry_run:
        config = dc.replace(config, dry_run=True)

    with HarborClient(harbor_config) as harbor, VaultClient(vault_config) as vault:
        result = HarborBootstrapper(harbor, vault, config).run(catalogue)
    return _print_result(result)


@app.command
def cosign_keys(
    *,
    services: Path | None = None,
    dry_run: bool = False,
    log_level: typ.Annotated[str, Parameter(env_var="TRELLIS_LOG_LEVEL")] = "INFO",
) -> int:
    """Generate a cosign key pair for every service lacking one.

    Args:
        services: Service catalogue file; defaults to ``TRELLIS_SERVICES_FILE``
            or ``services.yaml``.
        dry_run: Record intended changes without generating keys.
        log_level: Logging level.

    Returns:
        0 on success, 1 when any service failed, 2 on configuration errors.

    """
    _start(log_level)
    try:
        vault_config = VaultConfig.from_env()
        config = CosignKeysConfig.from_env()
    except _CONFIG_ERRORS as exc:
        return _config_failure(exc)
    catalogue = _load_catalogue(services)
    if catalogue is None:
        return EXIT_CONFIG_ERROR
    if dry_run:
        config = dc.replace(config, dry_run=True)

    with VaultClient(vault_config) as vault:
        result = CosignKeyProvisioner(vault, config).run(catalogue)
    return _print_result(result)


@app.command
def validate_services(
    services: Path | None = None,
) -> int:
    """Validate the service catalogue file and list its services.

    Args:
        services: Service catalogue file; defaults to ``TRELLIS_SERVICES_FILE``
            or ``services.yaml``.

    Returns:
        0 when valid, 2 otherwise.

    """
    catalogue = _load_catalogue(services)
    if catalogue is None:
        return EXIT_CONFIG_ERROR
    for name in catalogue.names:
        print(name)
    print(f"{len(catalogue.services)} services ok")
    return 0


def main() -> int:
    """Entry point for the CLI."""
    return app()
