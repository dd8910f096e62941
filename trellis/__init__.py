"""Provisioning scripts for Vault, Buildkite, GitHub, and Harbor.

Each subcommand of :mod:`trellis.cli` performs a short, idempotent sequence of
create-or-update calls against one remote API and reports a summary.
"""

from __future__ import annotations

__version__ = "0.1.0"
