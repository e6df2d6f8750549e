"""CrowdScene: live venue crowd levels from anonymous check-ins."""

__version__ = "1.0.0"
