"""Parse a multi-speaker script into speaker-tagged lines."""

import re
import time

from script_narrator.models import ScriptLine

# "Speaker: text", "[Speaker: text]" and "[Speaker]: text"; names are ASCII word characters
_LINE_RE = re.compile(r"^\[?([\w\s]+?)\]?\s*:\s*(.+?)\s*\]?$", re.ASCII)


def parse_line(line: str) -> tuple[str, str] | None:
    """Match one script line, returning (speaker, text) or None."""
    stripped = line.strip()
    if not stripped:
        return None
    match = _LINE_RE.match(stripped)
    if not match:
        return None
    speaker = match.group(1).strip()
    text = match.group(2).strip()
    if not speaker or not text:
        return None
    return speaker, text


def parse_script(text: str, timestamp: int | None = None) -> list[ScriptLine]:
    """Parse script text into an ordered list of ScriptLines.

    Lines that don't match the speaker pattern are dropped. Ids combine the
    input line index with a millisecond timestamp, so they are unique within
    one pass but change on every pass.
    """
    if timestamp is None:
        timestamp = time.time_ns() // 1_000_000

    lines = []
    for index, raw in enumerate(text.split("\n")):
        parsed = parse_line(raw)
        if parsed is None:
            continue
        speaker, body = parsed
        lines.append(ScriptLine(id=f"line-{index}-{timestamp}", speaker=speaker, text=body))
    return lines


def carry_forward_audio(previous: list[ScriptLine], lines: list[ScriptLine]) -> list[ScriptLine]:
    """Copy generated audio onto new lines whose (speaker, text) is unchanged.

    Lines are correlated by content, never by id. Modifies `lines` in place
    and returns it.
    """
    generated = {}
    for line in previous:
        key = (line.speaker, line.text)
        if line.audio_ref and key not in generated:
            generated[key] = line.audio_ref

    for line in lines:
        ref = generated.get((line.speaker, line.text))
        if ref:
            line.audio_ref = ref
    return lines


def distinct_speakers(lines: list[ScriptLine]) -> list[str]:
    """Speaker names in order of first appearance."""
    seen = {}
    for line in lines:
        seen.setdefault(line.speaker, None)
    return list(seen)
