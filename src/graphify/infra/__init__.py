"""Infrastructure: logging, settings, transport and artifact storage."""
