"""Gemini client construction shared by the remote gateways."""

import os

from google import genai

from script_narrator.constants import API_KEY_ENV
from script_narrator.errors import MissingCredentialError


def get_client(api_key: str | None = None) -> genai.Client:
    """Initialize a Gemini client from an explicit key or GEMINI_API_KEY."""
    api_key = api_key or os.environ.get(API_KEY_ENV)
    if not api_key:
        raise MissingCredentialError(
            f"{API_KEY_ENV} environment variable not set. Add it to your environment or .env file."
        )
    return genai.Client(api_key=api_key)
