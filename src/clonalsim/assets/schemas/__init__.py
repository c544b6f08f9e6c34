"""JSON schemas for configuration files and run artifacts."""
