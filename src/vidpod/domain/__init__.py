"""
Domain layer for VidPOD.

ORM entities for rundowns and their children, and the contracts of the
external collaborators the engine consumes.
"""
