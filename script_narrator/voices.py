"""Voice catalog: built-in synthetic voices plus session clones."""

import logging
import random
import uuid
from datetime import datetime, timezone

from script_narrator.models import CatalogVoice, ClonedVoice

logger = logging.getLogger(__name__)

# Prebuilt Gemini TTS voices offered to the user
AVAILABLE_VOICES = [
    CatalogVoice("Puck", "Male", "Deep, Resonant"),
    CatalogVoice("Charon", "Male", "Steady, Professional"),
    CatalogVoice("Kore", "Female", "Calm, Soothing"),
    CatalogVoice("Fenrir", "Male", "Energetic, Intense"),
    CatalogVoice("Zephyr", "Female", "Bright, Clear"),
]


class VoiceCatalog:
    """Static catalog voices and the mutable list of cloned voice aliases."""

    def __init__(self, voices: list[CatalogVoice] | None = None, rng: random.Random | None = None):
        self.voices = list(voices if voices is not None else AVAILABLE_VOICES)
        self.clones: list[ClonedVoice] = []
        self._rng = rng or random.Random()

    def voice_ids(self) -> list[str]:
        return [v.name for v in self.voices]

    def is_known(self, voice_id: str) -> bool:
        return voice_id in self.voice_ids()

    def find(self, filter_str: str | None = None) -> list[CatalogVoice]:
        """Catalog voices whose name, gender or style contains filter_str."""
        if not filter_str:
            return list(self.voices)
        needle = filter_str.lower()
        return [
            v for v in self.voices
            if needle in v.name.lower() or needle in v.gender.lower() or needle in v.style.lower()
        ]

    def get_clone(self, clone_id: str) -> ClonedVoice | None:
        for clone in self.clones:
            if clone.id == clone_id:
                return clone
        return None

    def create_clone(self, display_name: str, description: str) -> ClonedVoice:
        """Register a new cloned voice backed by a randomly chosen catalog voice.

        Display names are not required to be unique.
        """
        base = self._rng.choice(self.voices).name
        clone = ClonedVoice(
            id=f"clone-{uuid.uuid4().hex[:12]}",
            display_name=display_name,
            base_voice_id=base,
            description=description,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self.clones.append(clone)
        logger.info("Cloned voice %r backed by %s", display_name, base)
        return clone
