"""Export generated line audio and the concatenated narration."""

import json
import os
import re
from datetime import datetime, timezone

from script_narrator.clips import Clip, decode_container
from script_narrator.constants import VERSION
from script_narrator.models import ScriptLine
from script_narrator.session import NarrationSession


def slugify(name: str) -> str:
    """Filename-safe name: "Old Man" becomes "old_man"."""
    return re.sub(r"[^a-zA-Z0-9]+", "_", name).strip("_").lower() or "untitled"


def export_line(session: NarrationSession, line: ScriptLine, directory: str) -> str | None:
    """Write one line's WAVE container as {speaker}_{id}.wav. None if it has no audio."""
    if not line.audio_ref or line.audio_ref not in session.audio:
        return None
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, f"{line.speaker}_{line.id}.wav")
    with open(path, "wb") as f:
        f.write(session.audio.get(line.audio_ref))
    return path


def export_lines(session: NarrationSession, directory: str) -> list[str]:
    """Write every generated line as NNN_speaker.wav, numbered by script position."""
    os.makedirs(directory, exist_ok=True)
    paths = []
    for index, line in enumerate(session.lines):
        if not line.audio_ref or line.audio_ref not in session.audio:
            continue
        path = os.path.join(directory, f"{index + 1:03d}_{slugify(line.speaker)}.wav")
        with open(path, "wb") as f:
            f.write(session.audio.get(line.audio_ref))
        paths.append(path)
    return paths


def export_narration(session: NarrationSession, directory: str, fmt: str = "wav") -> str | None:
    """Concatenate generated lines in script order into one file.

    Applies each speaker's speed and volume the way playback does; the
    background track is not mixed in. Writes an output.json manifest beside
    the audio. Returns None if no line has audio.

    Creates:
      - <directory>/narration.<fmt>
      - <directory>/output.json
    """
    entries = []
    missing = []
    narration = None
    for index, line in enumerate(session.lines):
        if not line.audio_ref or line.audio_ref not in session.audio:
            missing.append({"index": index + 1, "speaker": line.speaker, "text": line.text})
            continue
        profile = session.profiles.get(line.speaker)
        speed = profile.config.speed if profile else 1.0
        volume = profile.config.volume if profile else 1.0
        clip = Clip.from_audio(
            decode_container(session.audio.get(line.audio_ref)),
            playback_rate=speed,
            volume=volume,
        )
        audio = clip.to_segment()
        narration = audio if narration is None else narration + audio
        entries.append({
            "index": index + 1,
            "speaker": line.speaker,
            "text": line.text,
            "voice": profile.config.voice_id if profile else None,
            "cloned": profile.config.is_cloned if profile else False,
            "speed": speed,
            "volume": volume,
            "duration_seconds": round(clip.duration, 2),
        })

    if narration is None:
        return None

    os.makedirs(directory, exist_ok=True)
    output_path = os.path.join(directory, f"narration.{fmt}")
    narration.export(output_path, format=fmt)

    manifest = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "narrator_version": VERSION,
        "lines": entries,
        "missing": missing,
        "stats": {
            "lines": len(session.lines),
            "generated": len(entries),
            "speakers": len(session.speakers),
            "duration_seconds": round(len(narration) / 1000, 1),
        },
    }
    with open(os.path.join(directory, "output.json"), "w") as f:
        json.dump(manifest, f, indent=2)

    return output_path

