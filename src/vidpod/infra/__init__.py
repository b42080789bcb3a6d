"""
Infrastructure layer for VidPOD.

Database engine, unit-of-work sessions, settings, logging and the error taxonomy.
"""
