"""Exceptions raised while building render configuration."""


class ConfigurationError(ValueError):
    """A render parameter failed validation; nothing has been rendered."""
