"""echoloop - record a take, trim its silence and loop it back."""

__version__ = "0.1.0"
