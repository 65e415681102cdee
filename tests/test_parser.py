"""Tests for parser module."""

from script_narrator.models import ScriptLine
from script_narrator.parser import carry_forward_audio, distinct_speakers, parse_line, parse_script


def test_parse_both_line_shapes():
    """Bracketed and plain lines parse; other lines are dropped."""
    lines = parse_script("[Bob: Hi there]\nNarrator: Once upon a time\nnot a line")
    assert [(l.speaker, l.text) for l in lines] == [
        ("Bob", "Hi there"),
        ("Narrator", "Once upon a time"),
    ]


def test_parse_trims_whitespace():
    lines = parse_script("   Alice   :    Hello world   ")
    assert lines[0].speaker == "Alice"
    assert lines[0].text == "Hello world"


def test_parse_speaker_with_digits_and_spaces():
    lines = parse_script("[Speaker 2: I'm good!]")
    assert lines[0].speaker == "Speaker 2"
    assert lines[0].text == "I'm good!"


def test_parse_bracketed_name_only():
    """[Name]: text is accepted too."""
    lines = parse_script("[Guard]: Halt!")
    assert (lines[0].speaker, lines[0].text) == ("Guard", "Halt!")


def test_parse_text_keeps_later_colons():
    lines = parse_script("Clock: It is 10:30")
    assert lines[0].speaker == "Clock"
    assert lines[0].text == "It is 10:30"


def test_parse_skips_blank_and_unmatched():
    text = "\n\n   \nJust prose without a speaker\n- Bob: dash prefix\nBob:\nBob: ok"
    lines = parse_script(text)
    assert len(lines) == 1
    assert lines[0].text == "ok"


def test_parse_line_returns_none_for_non_matching():
    assert parse_line("nothing to see") is None
    assert parse_line("   ") is None
    assert parse_line("Ann: hi") == ("Ann", "hi")


def test_ids_unique_within_pass():
    lines = parse_script("A: one\nA: one\nB: two", timestamp=1234)
    ids = [l.id for l in lines]
    assert len(set(ids)) == 3
    assert ids[0] == "line-0-1234"
    assert ids[2] == "line-2-1234"


def test_ids_follow_input_position():
    """Dropped lines still consume an index."""
    lines = parse_script("junk\nA: one", timestamp=1)
    assert lines[0].id == "line-1-1"


def test_new_lines_have_no_audio():
    lines = parse_script("A: one")
    assert lines[0].audio_ref is None
    assert lines[0].generating is False


def test_carry_forward_unchanged_line():
    previous = [ScriptLine(id="old", speaker="A", text="one", audio_ref="blob:1")]
    lines = carry_forward_audio(previous, parse_script("A: one\nB: two"))
    assert lines[0].audio_ref == "blob:1"
    assert lines[1].audio_ref is None


def test_carry_forward_drops_on_edit():
    """Changing either the speaker or the text drops the audio."""
    previous = [
        ScriptLine(id="a", speaker="A", text="one", audio_ref="blob:1"),
        ScriptLine(id="b", speaker="B", text="two", audio_ref="blob:2"),
    ]
    lines = carry_forward_audio(previous, parse_script("A: one!\nC: two"))
    assert all(l.audio_ref is None for l in lines)


def test_distinct_speakers_in_first_seen_order():
    lines = parse_script("B: x\nA: y\nB: z")
    assert distinct_speakers(lines) == ["B", "A"]


def test_speaker_names_are_ascii_only():
    """Accented names are not speaker names; accented text is fine."""
    assert parse_line("José: hola") is None
    assert parse_line("Ann: José dijo hola") == ("Ann", "José dijo hola")
