"""Default element passes applied when no transform claims a tag."""
