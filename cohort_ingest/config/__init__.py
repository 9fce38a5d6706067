"""Configuration loading (YAML validated with jsonschema)."""
