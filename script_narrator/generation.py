"""Per-line audio generation with partial-failure tolerance."""

import logging

from script_narrator.constants import VOICE_PREVIEW_TEMPLATE
from script_narrator.errors import ProviderError
from script_narrator.models import ScriptLine
from script_narrator.session import NarrationSession
from script_narrator.tts import SpeechSynthesisGateway

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Generates audio for script lines one at a time, in script order.

    Requests are never issued concurrently. A failed line is left without
    audio and the batch moves on; there is no retry.
    """

    def __init__(self, session: NarrationSession, gateway: SpeechSynthesisGateway):
        self.session = session
        self.gateway = gateway
        self._previewing = False

    async def generate_all(self) -> list[ScriptLine]:
        """Generate every line that has no audio yet.

        The next line is looked up in the session before each request, so a
        re-parse during the batch is picked up instead of a stale snapshot.
        Each line is attempted at most once per batch. Ids restart from the
        parse timestamp, so a line is identified by id and content together.
        """
        session = self.session
        if session.generating or not session.lines:
            return session.lines

        done = sum(1 for line in session.lines if line.audio_ref)
        if done:
            print(f"  [skip] {done}/{len(session.lines)} lines already have audio")

        attempted = set()
        session.generating = True
        try:
            while True:
                pending = self._next_pending(attempted)
                if pending is None:
                    break
                position, line = pending
                attempted.add(_key(line))
                print(f"  Generating line {position + 1}/{len(session.lines)}: {line.speaker}")
                await self._generate(line)
        finally:
            session.generating = False
        return session.lines

    async def generate_line(self, line_id: str) -> bool:
        """(Re)generate a single line.

        Shares the session-wide generating flag with generate_all, so it is a
        no-op while a batch runs. The old audio is kept until the new audio
        arrives and is released only then.
        """
        session = self.session
        line = session.line(line_id)
        if line is None or line.generating or session.generating:
            return False
        session.generating = True
        try:
            return await self._generate(line, replace=True)
        finally:
            session.generating = False

    async def preview_voice(self, speaker: str, voice_id: str | None = None) -> bytes | None:
        """Synthesize a short greeting in a speaker's (or the given) voice.

        Only one preview runs at a time; returns None when busy or on failure.
        """
        if self._previewing:
            return None
        if voice_id is None:
            profile = self.session.profiles.get(speaker)
            if profile is None:
                return None
            voice_id = profile.config.voice_id

        self._previewing = True
        try:
            return await self.gateway.synthesize(VOICE_PREVIEW_TEMPLATE.format(speaker=speaker), voice_id)
        except ProviderError as e:
            logger.warning("Voice preview failed for %s: %s", speaker, e)
            return None
        finally:
            self._previewing = False

    async def _generate(self, line: ScriptLine, replace: bool = False) -> bool:
        profile = self.session.profiles.get(line.speaker)
        if profile is None:
            logger.warning("No voice profile for speaker %r, skipping line %s", line.speaker, line.id)
            return False

        line.generating = True
        try:
            container = await self.gateway.synthesize(line.text, profile.config.voice_id)
        except ProviderError as e:
            logger.warning("Error generating line %s (%s): %s", line.id, line.speaker, e)
            return False
        finally:
            line.generating = False

        current = self._current(line, replace)
        if current is None:
            logger.debug("Line %s vanished during synthesis, discarding audio", line.id)
            return False
        previous = current.audio_ref
        current.generating = False
        current.audio_ref = self.session.audio.put(container)
        if previous:
            self.session.release_if_unused(previous)
        return True

    def _next_pending(self, attempted: set[tuple[str, str, str]]) -> tuple[int, ScriptLine] | None:
        for position, line in enumerate(self.session.lines):
            if not line.audio_ref and not line.generating and _key(line) not in attempted:
                return position, line
        return None

    def _current(self, line: ScriptLine, replace: bool = False) -> ScriptLine | None:
        """Re-read the line after an await; fall back to content if re-parsed."""
        current = self.session.line(line.id)
        if current is None or _key(current) != _key(line):
            current = self.session.find_line(line.speaker, line.text, without_audio=not replace)
        return current


def _key(line: ScriptLine) -> tuple[str, str, str]:
    return line.id, line.speaker, line.text
