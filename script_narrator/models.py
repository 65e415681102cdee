"""Data models for script narration."""

from dataclasses import dataclass, field

from script_narrator.constants import (
    BACKGROUND_VOLUME,
    DEFAULT_PITCH,
    DEFAULT_SPEED,
    DEFAULT_VOICE,
    DEFAULT_VOLUME,
)


@dataclass
class ScriptLine:
    id: str
    speaker: str
    text: str
    audio_ref: str | None = None    # AudioStore handle, set by generation
    generating: bool = False


@dataclass
class VoiceConfig:
    voice_id: str = DEFAULT_VOICE
    speed: float = DEFAULT_SPEED
    pitch: float = DEFAULT_PITCH    # accepted, not applied
    volume: float = DEFAULT_VOLUME
    is_cloned: bool = False
    clone_source_id: str | None = None


@dataclass
class SpeakerProfile:
    speaker_name: str
    config: VoiceConfig = field(default_factory=VoiceConfig)


@dataclass(frozen=True)
class CatalogVoice:
    name: str
    gender: str
    style: str


@dataclass(frozen=True)
class ClonedVoice:
    id: str
    display_name: str
    base_voice_id: str      # catalog voice actually used for synthesis
    description: str        # analysis result
    created_at: str         # ISO 8601, UTC


@dataclass
class BackgroundTrack:
    path: str
    loop: bool = True
    volume: float = BACKGROUND_VOLUME
