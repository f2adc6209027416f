"""Case workflow API for an advisory practice's client pipeline."""
