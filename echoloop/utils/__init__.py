"""Configuration, device lookup, file loading and event dispatch helpers."""
