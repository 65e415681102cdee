"""Tests for the playback orchestrator."""

import asyncio

import pytest

from conftest import FakeOutput, make_wav
from script_narrator.playback import PlaybackOrchestrator, PlaybackState
from script_narrator.session import NarrationSession

FOUR_LINES = "A: one\nB: two\nA: three\nB: four"


def _session(generated=(0, 1, 2, 3)):
    session = NarrationSession()
    session.set_script(FOUR_LINES)
    for index in generated:
        session.lines[index].audio_ref = session.audio.put(make_wav(100))
    return session


def _with_music(session, tmp_path):
    path = tmp_path / "music.wav"
    path.write_bytes(make_wav(300, freq=220.0))
    session.set_background(str(path))
    return session


def test_collects_generated_lines_in_order():
    session = _session(generated=(0, 2, 3))
    clips = PlaybackOrchestrator(session, FakeOutput()).collect_clips()
    assert [c.label for c in clips] == [session.lines[i].id for i in (0, 2, 3)]


def test_clip_uses_speaker_speed_and_volume():
    session = _session()
    session.update_profile("B", speed=2.0, volume=0.5)
    clips = PlaybackOrchestrator(session, FakeOutput()).collect_clips()
    assert clips[0].playback_rate == 1.0
    assert clips[1].playback_rate == 2.0
    assert clips[1].volume == 0.5
    assert len(clips[1].samples) == len(clips[0].samples) // 2


def test_plays_sequence_to_completion():
    session = _session(generated=(0, 2, 3))
    output = FakeOutput()
    player = PlaybackOrchestrator(session, output)

    async def run():
        assert await player.start() is True
        assert player.state is PlaybackState.PLAYING
        await player.wait()

    asyncio.run(run())
    assert output.started == player.clips
    assert len(output.started) == 3
    assert player.state is PlaybackState.IDLE


def test_nothing_to_play():
    player = PlaybackOrchestrator(_session(generated=()), FakeOutput())
    assert asyncio.run(player.start()) is False
    assert player.state is PlaybackState.IDLE


def test_stop_mid_sequence():
    output = FakeOutput(auto_end=False)
    player = PlaybackOrchestrator(_session(), output)

    async def run():
        await player.start()
        await asyncio.sleep(0)
        player.clips[0].position = 500
        player.stop()
        await player.wait()

    asyncio.run(run())
    assert player.state is PlaybackState.IDLE
    assert output.started == [player.clips[0]]
    assert output.stopped == [player.clips[0]]
    assert all(c.paused for c in player.clips)
    assert all(c.position == 0 for c in player.clips)


def test_start_while_playing_stops():
    player = PlaybackOrchestrator(_session(), FakeOutput(auto_end=False))

    async def run():
        await player.start()
        return await player.start()

    assert asyncio.run(run()) is False
    assert player.state is PlaybackState.IDLE


def test_toggle():
    player = PlaybackOrchestrator(_session(), FakeOutput(auto_end=False))

    async def run():
        first = await player.toggle()
        second = await player.toggle()
        return first, second

    assert asyncio.run(run()) == (PlaybackState.PLAYING, PlaybackState.IDLE)


def test_background_loops_under_narration(tmp_path):
    session = _with_music(_session(), tmp_path)
    output = FakeOutput()
    player = PlaybackOrchestrator(session, output)

    async def run():
        await player.start()
        await player.wait()

    asyncio.run(run())
    background = player.background
    assert output.started[0] is background
    assert background.loop is True
    assert background.volume == 0.3
    assert background.paused is True
    assert player.state is PlaybackState.IDLE


def test_background_created_once(tmp_path):
    session = _with_music(_session(), tmp_path)
    output = FakeOutput()
    player = PlaybackOrchestrator(session, output)

    async def run():
        await player.start()
        await player.wait()
        first = player.background
        await player.start()
        await player.wait()
        return first

    first = asyncio.run(run())
    assert player.background is first
    assert output.started.count(first) == 2


def test_stop_rewinds_background(tmp_path):
    session = _with_music(_session(), tmp_path)
    output = FakeOutput(auto_end=False)
    player = PlaybackOrchestrator(session, output)

    async def run():
        await player.start()
        player.background.read(1000)
        player.stop()

    asyncio.run(run())
    assert player.background.paused is True
    assert player.background.position == 0
    assert player.background in output.stopped


def test_play_line():
    session = _session(generated=(1,))
    output = FakeOutput()
    player = PlaybackOrchestrator(session, output)
    assert asyncio.run(player.play_line(session.lines[1].id)) is True
    assert output.started[0].label == session.lines[1].id
    assert asyncio.run(player.play_line(session.lines[0].id)) is False


def test_play_audio():
    output = FakeOutput()
    player = PlaybackOrchestrator(NarrationSession(), output)
    assert asyncio.run(player.play_audio(make_wav(50), label="Bob preview")) is True
    assert output.started[0].label == "Bob preview"


def test_undecodable_background_leaves_idle(tmp_path):
    session = _session()
    path = tmp_path / "music.wav"
    path.write_bytes(b"not audio at all")
    session.set_background(str(path))
    output = FakeOutput()
    player = PlaybackOrchestrator(session, output)

    with pytest.raises(Exception):
        asyncio.run(player.start())
    assert player.state is PlaybackState.IDLE
    assert player.clips == []
    assert output.started == []

    session.set_background(None)

    async def run():
        assert await player.toggle() is PlaybackState.PLAYING
        await player.wait()

    asyncio.run(run())
    assert player.state is PlaybackState.IDLE
    assert len(output.started) == 4
