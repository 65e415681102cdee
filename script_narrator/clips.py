"""Playable clips over decoded audio, and the sound device output."""

import asyncio
import io
import logging

import numpy as np
from pydub import AudioSegment

logger = logging.getLogger(__name__)


def segment_to_samples(audio: AudioSegment) -> np.ndarray:
    """Convert a pydub AudioSegment to float32 frames in [-1, 1], shape (frames, channels)."""
    samples = np.array(audio.get_array_of_samples(), dtype=np.float32)
    samples = samples.reshape((-1, audio.channels))
    return samples / float(1 << (8 * audio.sample_width - 1))


def samples_to_segment(samples: np.ndarray, frame_rate: int) -> AudioSegment:
    """Convert float32 frames back to a 16-bit AudioSegment."""
    pcm = np.clip(samples * 32768.0, -32768, 32767).astype(np.int16)
    return AudioSegment(
        data=pcm.flatten().tobytes(),
        sample_width=2,
        frame_rate=frame_rate,
        channels=samples.shape[1],
    )


def change_rate(samples: np.ndarray, playback_rate: float) -> np.ndarray:
    """Time-scale frames by linear interpolation (rate 2.0 plays twice as fast)."""
    if playback_rate == 1.0 or len(samples) == 0:
        return samples
    length = max(1, int(round(len(samples) / playback_rate)))
    positions = np.linspace(0, len(samples) - 1, length)
    source = np.arange(len(samples))
    channels = [np.interp(positions, source, samples[:, c]) for c in range(samples.shape[1])]
    return np.stack(channels, axis=1).astype(np.float32)


def decode_container(data: bytes) -> AudioSegment:
    """Decode a WAVE container produced by the synthesis gateway."""
    return AudioSegment.from_file(io.BytesIO(data), format="wav")


class Clip:
    """One playable unit of audio, modelled on a media element.

    Holds its own play position, a linear volume and a loop flag. The output
    pulls frames with read() and signals natural completion with mark_ended().
    """

    def __init__(
        self,
        samples: np.ndarray,
        frame_rate: int,
        volume: float = 1.0,
        loop: bool = False,
        playback_rate: float = 1.0,
        label: str = "",
    ):
        self.samples = samples
        self.frame_rate = frame_rate
        self.volume = volume
        self.loop = loop
        self.playback_rate = playback_rate
        self.label = label
        self.position = 0
        self.paused = True
        self._output = None
        self._ended = asyncio.Event()

    @classmethod
    def from_audio(
        cls,
        audio: AudioSegment,
        playback_rate: float = 1.0,
        volume: float = 1.0,
        loop: bool = False,
        label: str = "",
    ) -> "Clip":
        samples = change_rate(segment_to_samples(audio), playback_rate)
        return cls(samples, audio.frame_rate, volume=volume, loop=loop,
                   playback_rate=playback_rate, label=label)

    @property
    def channels(self) -> int:
        return self.samples.shape[1]

    @property
    def duration(self) -> float:
        """Length in seconds, after rate scaling."""
        return len(self.samples) / self.frame_rate

    @property
    def ended(self) -> bool:
        return self._ended.is_set()

    def play(self, output) -> None:
        self._ended.clear()
        self.paused = False
        self._output = output
        output.start(self)

    def pause(self) -> None:
        if self.paused:
            return
        self.paused = True
        if self._output is not None:
            self._output.stop(self)

    def reset(self) -> None:
        self.position = 0

    def read(self, frames: int) -> np.ndarray:
        """Next `frames` frames scaled by volume; shorter at the end of a non-looping clip."""
        total = len(self.samples)
        if total == 0:
            return self.samples[:0]
        if not self.loop:
            chunk = self.samples[self.position:self.position + frames]
            self.position += len(chunk)
            return chunk * self.volume

        parts = []
        needed = frames
        while needed > 0:
            part = self.samples[self.position:self.position + needed]
            parts.append(part)
            needed -= len(part)
            self.position = (self.position + len(part)) % total
        return np.concatenate(parts) * self.volume

    def mark_ended(self) -> None:
        self.paused = True
        self._ended.set()

    async def wait_ended(self) -> None:
        await self._ended.wait()

    def to_segment(self) -> AudioSegment:
        """Rate-scaled, volume-applied audio for export."""
        return samples_to_segment(self.samples * self.volume, self.frame_rate)


class SoundDeviceOutput:
    """Plays each clip on its own sounddevice output stream.

    Streams run concurrently, so a looping background clip can play under the
    narration. Must be used from inside a running event loop.
    """

    def __init__(self, blocksize: int = 1024):
        import sounddevice

        self._sd = sounddevice
        self.blocksize = blocksize
        self._streams = {}

    def start(self, clip: Clip) -> None:
        self._close(clip)
        loop = asyncio.get_running_loop()
        sd = self._sd

        def callback(outdata, frames, time_info, status):
            if status:
                logger.debug("Output status for %s: %s", clip.label, status)
            chunk = clip.read(frames)
            outdata[:len(chunk)] = chunk
            if len(chunk) < frames:
                outdata[len(chunk):] = 0
                raise sd.CallbackStop

        def finished():
            if not loop.is_closed():
                loop.call_soon_threadsafe(self._finished, clip, stream)

        stream = sd.OutputStream(
            samplerate=clip.frame_rate,
            channels=clip.channels,
            dtype="float32",
            blocksize=self.blocksize,
            callback=callback,
            finished_callback=finished,
        )
        self._streams[clip] = stream
        stream.start()

    def stop(self, clip: Clip) -> None:
        self._close(clip)

    def close(self) -> None:
        for clip in list(self._streams):
            self._close(clip)

    def _finished(self, clip: Clip, stream) -> None:
        # Streams replaced by a stop or a restart were already closed.
        if self._streams.get(clip) is not stream:
            return
        del self._streams[clip]
        stream.close()
        if not clip.paused:
            clip.mark_ended()

    def _close(self, clip: Clip) -> None:
        stream = self._streams.pop(clip, None)
        if stream is not None:
            stream.abort()
            stream.close()
