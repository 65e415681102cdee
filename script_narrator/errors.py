"""Exceptions raised by the narration pipeline."""


class ProviderError(Exception):
    """A synthesis call failed or returned no audio payload."""


class MissingCredentialError(RuntimeError):
    """No provider API key is configured; blocks every remote call."""
