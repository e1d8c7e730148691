"""Pure building blocks of the preview pipeline."""
