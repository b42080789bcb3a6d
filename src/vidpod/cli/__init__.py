"""Operator command-line interface for VidPOD."""
