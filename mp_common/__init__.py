"""Shared helpers for machine-provisioner."""

from mp_common.api import MPError, configure_logging

__all__ = ["configure_logging", "MPError"]
