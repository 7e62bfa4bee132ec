"""MongoDB document models."""
