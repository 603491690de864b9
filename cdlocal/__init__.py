"""Local deployment validation and planning, plus helpers for installing an agent service."""

__version__ = "0.1.0"
__all__ = ["events", "localdeploy", "sysinstall"]