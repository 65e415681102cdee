"""Session state shared by every pipeline stage."""

import logging

from script_narrator.models import BackgroundTrack, ScriptLine, VoiceConfig
from script_narrator.parser import carry_forward_audio, distinct_speakers, parse_script
from script_narrator.profiles import SpeakerProfileStore
from script_narrator.store import AudioStore
from script_narrator.voices import VoiceCatalog

logger = logging.getLogger(__name__)


class NarrationSession:
    """Owns the script lines, speaker profiles, clones, audio and background track.

    One instance is created per session and handed to the orchestrators by
    reference; nothing here is global.
    """

    def __init__(self, catalog: VoiceCatalog | None = None, audio: AudioStore | None = None):
        self.catalog = catalog or VoiceCatalog()
        self.profiles = SpeakerProfileStore(self.catalog)
        self.audio = audio or AudioStore()
        self.lines: list[ScriptLine] = []
        self.background: BackgroundTrack | None = None
        self.generating = False
        self._speaker_set: frozenset[str] = frozenset()

    @property
    def speakers(self) -> list[str]:
        return distinct_speakers(self.lines)

    def set_script(self, text: str) -> list[ScriptLine]:
        """Re-parse the script, keeping audio for unchanged lines.

        Blobs that no new line refers to are released, and profiles are
        re-synced when the set of speakers changed.
        """
        lines = carry_forward_audio(self.lines, parse_script(text))
        kept = {line.audio_ref for line in lines if line.audio_ref}
        for old in self.lines:
            if old.audio_ref and old.audio_ref not in kept:
                self.audio.release(old.audio_ref)
        self.lines = lines

        speaker_set = frozenset(line.speaker for line in lines)
        if speaker_set != self._speaker_set:
            self.profiles.sync(self.speakers)
            self._speaker_set = speaker_set
        return self.lines

    def line(self, line_id: str) -> ScriptLine | None:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def find_line(self, speaker: str, text: str, without_audio: bool = False) -> ScriptLine | None:
        """First line with the given content, optionally only one still missing audio."""
        for line in self.lines:
            if line.speaker == speaker and line.text == text:
                if without_audio and line.audio_ref:
                    continue
                return line
        return None

    def release_if_unused(self, ref: str | None) -> bool:
        """Release a blob unless some current line still refers to it."""
        if ref is None or any(line.audio_ref == ref for line in self.lines):
            return False
        return self.audio.release(ref)

    def update_profile(self, speaker: str, **changes) -> VoiceConfig:
        return self.profiles.update_profile(speaker, **changes)

    def set_background(self, path: str | None) -> BackgroundTrack | None:
        self.background = BackgroundTrack(path=path) if path else None
        return self.background

    def close(self) -> None:
        """Release every generated blob and forget line audio."""
        count = self.audio.release_all()
        for line in self.lines:
            line.audio_ref = None
        logger.debug("Session closed, released %d audio blobs", count)
