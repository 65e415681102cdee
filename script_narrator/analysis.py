"""Voice sample analysis used as clone metadata."""

import logging
import mimetypes
from pathlib import Path

from google import genai
from google.genai import types

from script_narrator.constants import (
    ANALYSIS_EMPTY_RESULT,
    ANALYSIS_FALLBACK,
    ANALYSIS_MODEL,
    ANALYSIS_PROMPT,
)
from script_narrator.gemini import get_client

logger = logging.getLogger(__name__)


class VoiceAnalysisGateway:
    """Describes a voice sample in one sentence.

    Never raises for remote or file errors; returns a fallback description
    instead. A missing API key still raises.
    """

    def __init__(self, client: genai.Client | None = None, model: str = ANALYSIS_MODEL):
        self._client = client
        self.model = model

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    async def analyze(self, path: str, mime_type: str | None = None) -> str:
        client = self.client
        mime_type = mime_type or mimetypes.guess_type(path)[0] or "audio/mpeg"
        try:
            data = Path(path).read_bytes()
            # Part.from_bytes is serialized as base64 inline data
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_bytes(data=data, mime_type=mime_type),
                    ANALYSIS_PROMPT,
                ],
            )
        except Exception as e:
            logger.warning("Voice analysis failed for %s: %s", path, e)
            return ANALYSIS_FALLBACK
        return response.text or ANALYSIS_EMPTY_RESULT
