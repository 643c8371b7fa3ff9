"""Signal insights: pipeline orchestration plus keyword, pattern and theme analysis."""

__version__ = "0.1.0"
