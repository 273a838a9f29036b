"""ViralClip - transcript clip scoring and automated posting."""

__version__ = "1.0.0"
