"""courtscout: nearby court discovery engine."""

__version__ = "1.0.0"
