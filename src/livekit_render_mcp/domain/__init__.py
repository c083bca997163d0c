"""Diagnosis, repair and reporting logic for LiveKit deployments on Render."""
