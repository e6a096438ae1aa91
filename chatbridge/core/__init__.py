"""Core module - Configuration, transcript and streaming relay."""
