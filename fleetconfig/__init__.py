"""Drift detection, cleanup and rollout planning for scaling-group launch configurations and templates."""

__version__ = "0.1.0"
__all__ = ["configuration", "launchconfig", "launchtemplate", "models", "rollout", "state"]