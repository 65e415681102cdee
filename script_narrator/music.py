"""Background music loading."""

import logging
import os

from pydub import AudioSegment

from script_narrator.clips import Clip
from script_narrator.models import BackgroundTrack

logger = logging.getLogger(__name__)


def load_background(track: BackgroundTrack) -> Clip:
    """Decode a background track into a looping clip at the track's volume.

    The format is taken from the file extension. Also serves as validation:
    a missing or corrupt file raises.
    """
    if not os.path.exists(track.path):
        raise FileNotFoundError(f"Background track not found: {track.path}")
    audio = AudioSegment.from_file(track.path)
    logger.info("Loaded background track %s (%.1fs)", track.path, len(audio) / 1000)
    return Clip.from_audio(
        audio,
        volume=track.volume,
        loop=track.loop,
        label=os.path.basename(track.path),
    )
