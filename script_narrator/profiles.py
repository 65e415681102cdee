"""Per-speaker voice profiles."""

import logging
from dataclasses import fields, replace
from typing import Iterable, Iterator

from script_narrator.constants import PITCH_RANGE, SPEED_RANGE, VOLUME_RANGE
from script_narrator.models import SpeakerProfile, VoiceConfig
from script_narrator.voices import VoiceCatalog

logger = logging.getLogger(__name__)

_CONFIG_FIELDS = {f.name for f in fields(VoiceConfig)}

_RANGES = {
    "speed": SPEED_RANGE,
    "pitch": PITCH_RANGE,
    "volume": VOLUME_RANGE,
}


class SpeakerProfileStore:
    """Maps each speaker name to its VoiceConfig.

    Profiles are created lazily with default settings and are never removed,
    even when a speaker disappears from the script.
    """

    def __init__(self, catalog: VoiceCatalog):
        self.catalog = catalog
        self.profiles: dict[str, SpeakerProfile] = {}

    def __contains__(self, speaker: str) -> bool:
        return speaker in self.profiles

    def __iter__(self) -> Iterator[SpeakerProfile]:
        return iter(self.profiles.values())

    def __len__(self) -> int:
        return len(self.profiles)

    def get(self, speaker: str) -> SpeakerProfile | None:
        return self.profiles.get(speaker)

    def sync(self, speakers: Iterable[str]) -> list[str]:
        """Ensure every speaker has a profile. Returns the names added."""
        added = []
        for speaker in speakers:
            if speaker in self.profiles:
                continue
            self.profiles[speaker] = SpeakerProfile(speaker_name=speaker)
            added.append(speaker)
        if added:
            logger.debug("New speaker profiles: %s", ", ".join(added))
        return added

    def update_profile(self, speaker: str, **changes) -> VoiceConfig:
        """Merge the given fields into a speaker's config.

        Unspecified fields are left untouched. Passing clone_source_id switches
        the speaker to that cloned voice; passing voice_id alone switches back
        to a catalog voice.
        """
        profile = self.profiles.get(speaker)
        if profile is None:
            raise KeyError(f"No profile for speaker: {speaker}")

        unknown = set(changes) - _CONFIG_FIELDS
        if unknown:
            raise TypeError(f"Unknown voice settings: {', '.join(sorted(unknown))}")

        for name, (low, high) in _RANGES.items():
            if name in changes and not low <= changes[name] <= high:
                raise ValueError(f"{name} must be between {low} and {high}, got {changes[name]}")

        if changes.get("clone_source_id"):
            clone = self.catalog.get_clone(changes["clone_source_id"])
            if clone is None:
                raise ValueError(f"Unknown cloned voice: {changes['clone_source_id']}")
            changes["is_cloned"] = True
            changes["voice_id"] = clone.base_voice_id
        elif "voice_id" in changes:
            changes["is_cloned"] = False
            changes["clone_source_id"] = None

        config = replace(profile.config, **changes)
        if config.is_cloned and self.catalog.get_clone(config.clone_source_id or "") is None:
            raise ValueError(f"Cloned profile for {speaker} has no clone source")

        profile.config = config
        return config
