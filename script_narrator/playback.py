"""Sequential narration playback with an optional looping background track."""

import asyncio
import logging
from enum import Enum

from script_narrator.clips import Clip, SoundDeviceOutput, decode_container
from script_narrator.music import load_background
from script_narrator.session import NarrationSession

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"


class PlaybackOrchestrator:
    """Plays generated lines back-to-back in script order.

    Lines without audio are skipped without inserting silence. Each clip gets
    its speaker's speed as playback rate and volume as gain; pitch has no
    effect on playback. Only one sequence plays at a time: toggling while
    playing stops.
    """

    def __init__(self, session: NarrationSession, output=None):
        self.session = session
        self.state = PlaybackState.IDLE
        self.clips: list[Clip] = []
        self.background: Clip | None = None
        self._output = output
        self._background_path: str | None = None
        self._task: asyncio.Task | None = None

    @property
    def output(self):
        if self._output is None:
            self._output = SoundDeviceOutput()
        return self._output

    @property
    def playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    def collect_clips(self) -> list[Clip]:
        """Build one clip per generated line, in script order."""
        clips = []
        for line in self.session.lines:
            if not line.audio_ref or line.audio_ref not in self.session.audio:
                continue
            audio = decode_container(self.session.audio.get(line.audio_ref))
            profile = self.session.profiles.get(line.speaker)
            if profile is None:
                clip = Clip.from_audio(audio, label=line.id)
            else:
                clip = Clip.from_audio(
                    audio,
                    playback_rate=profile.config.speed,
                    volume=profile.config.volume,
                    label=line.id,
                )
            clips.append(clip)
        return clips

    async def toggle(self) -> PlaybackState:
        if self.playing:
            self.stop()
        else:
            await self.start()
        return self.state

    async def start(self) -> bool:
        """Start the narration sequence. Returns False if nothing is playable.

        An undecodable background track raises before any state changes.
        """
        if self.playing:
            self.stop()
            return False

        clips = self.collect_clips()
        if not clips:
            logger.info("No generated audio to play")
            return False

        background = self._background_clip()
        self.clips = clips
        self.state = PlaybackState.PLAYING
        if background is not None:
            background.play(self.output)
        self._task = asyncio.get_running_loop().create_task(self._run(clips))
        return True

    def stop(self) -> None:
        """Halt every clip immediately and rewind it, background included."""
        if not self.playing:
            return
        if self._task is not None:
            self._task.cancel()
            self._task = None
        for clip in self.clips:
            clip.pause()
            clip.reset()
        if self.background is not None:
            self.background.pause()
            self.background.reset()
        self.state = PlaybackState.IDLE

    async def wait(self) -> None:
        """Wait until the current sequence finishes or is stopped."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def play_line(self, line_id: str) -> bool:
        """Play a single generated line on its own."""
        line = self.session.line(line_id)
        if line is None or not line.audio_ref or line.audio_ref not in self.session.audio:
            return False
        return await self.play_audio(self.session.audio.get(line.audio_ref), label=line.id)

    async def play_audio(self, data: bytes, label: str = "preview") -> bool:
        """Play one WAVE container to completion, e.g. a voice preview."""
        clip = Clip.from_audio(decode_container(data), label=label)
        clip.play(self.output)
        await clip.wait_ended()
        return True

    async def _run(self, clips: list[Clip]) -> None:
        for index, clip in enumerate(clips):
            logger.debug("Playing clip %d/%d: %s", index + 1, len(clips), clip.label)
            clip.play(self.output)
            await clip.wait_ended()
        self._finish()

    def _finish(self) -> None:
        self.state = PlaybackState.IDLE
        self._task = None
        if self.background is not None:
            self.background.pause()

    def _background_clip(self) -> Clip | None:
        """The looping background clip, decoded once per track file."""
        track = self.session.background
        if track is None:
            return None
        if self.background is None or self._background_path != track.path:
            if self.background is not None:
                self.background.pause()
            self.background = load_background(track)
            self._background_path = track.path
        return self.background
