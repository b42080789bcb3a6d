"""VidPOD rundown composition engine."""

__version__ = "0.3.0"
