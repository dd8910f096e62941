"""Helpers shared across the provisioning scripts."""
