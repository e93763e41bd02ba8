"""MVE resource server: concert session coordination over Redis."""

__version__ = "1.0.0"
