"""reelfinder — natural-language movie and TV search over the TMDb catalog."""

__version__ = "0.1.0"
