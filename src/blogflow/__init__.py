"""Blog flow: topic, outline and content generation with outline editing and cached search lookups."""

__version__ = "0.1.0"
