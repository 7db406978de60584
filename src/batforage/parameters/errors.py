"""Exceptions raised by the parameter layer."""


class ConfigurationError(ValueError):
    """Raised when a simulation parameter is outside its documented range."""
