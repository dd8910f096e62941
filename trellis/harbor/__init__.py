"""Harbor bootstrap: per-service projects and CI robot accounts."""

from __future__ import annotations

from .bootstrap import (
    HarborBootstrapConfig,
    HarborBootstrapper,
    harbor_secret_path,
    robot_name,
)
from .client import HarborClient, HarborConfig
from .errors import (
    HarborAPIError,
    HarborConfigError,
    HarborConflictError,
    HarborResponseShapeError,
)
from .models import Robot, RobotCredentials

__all__ = [
    "HarborAPIError",
    "HarborBootstrapConfig",
    "HarborBootstrapper",
    "HarborClient",
    "HarborConfig",
    "HarborConfigError",
    "HarborConflictError",
    "HarborResponseShapeError",
    "Robot",
    "RobotCredentials",
    "harbor_secret_path",
    "robot_name",
]
