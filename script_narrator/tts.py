"""Speech synthesis via Gemini TTS, wrapped into WAVE containers."""

import base64
import logging
import struct

from google import genai
from google.genai import types

from script_narrator.constants import (
    PCM_BITS_PER_SAMPLE,
    PCM_CHANNELS,
    PCM_SAMPLE_RATE,
    TTS_MODEL,
)
from script_narrator.errors import ProviderError
from script_narrator.gemini import get_client

logger = logging.getLogger(__name__)

# RIFF chunk descriptor, fmt sub-chunk, data sub-chunk header
_WAV_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def add_wav_header(
    pcm: bytes,
    sample_rate: int = PCM_SAMPLE_RATE,
    channels: int = PCM_CHANNELS,
    bits_per_sample: int = PCM_BITS_PER_SAMPLE,
) -> bytes:
    """Prefix raw linear PCM with a standard 44-byte RIFF/WAVE header."""
    block_align = channels * bits_per_sample // 8
    header = _WAV_HEADER.pack(
        b"RIFF", 36 + len(pcm), b"WAVE",
        b"fmt ", 16, 1, channels, sample_rate, sample_rate * block_align, block_align, bits_per_sample,
        b"data", len(pcm),
    )
    return header + pcm


def _extract_audio(response) -> bytes | None:
    """Pull the inline audio payload out of the first response part."""
    candidates = getattr(response, "candidates", None)
    if not candidates or candidates[0].content is None or not candidates[0].content.parts:
        return None
    inline = candidates[0].content.parts[0].inline_data
    if inline is None or not inline.data:
        return None
    data = inline.data
    if isinstance(data, str):
        data = base64.b64decode(data)
    return data


class SpeechSynthesisGateway:
    """Turns (text, voice) into a playable WAVE container.

    The client is created on first use, so a missing API key surfaces as
    MissingCredentialError from the first synthesize() call.
    """

    def __init__(self, client: genai.Client | None = None, model: str = TTS_MODEL):
        self._client = client
        self.model = model

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        """Synthesize one utterance. Raises ProviderError on any remote failure."""
        client = self.client
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_id)
                )
            ),
        )
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=text,
                config=config,
            )
        except Exception as e:
            raise ProviderError(f"TTS request failed for voice {voice_id}: {e}") from e

        pcm = _extract_audio(response)
        if not pcm:
            raise ProviderError("No audio data returned from Gemini.")
        return add_wav_header(pcm)
