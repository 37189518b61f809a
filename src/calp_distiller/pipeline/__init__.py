"""Pipeline orchestration for harvesting publications."""

from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]
