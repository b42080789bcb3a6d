"""HTTP surface for VidPOD."""
