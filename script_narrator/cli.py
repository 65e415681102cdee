"""CLI interface with subcommand routing and pipeline orchestration."""

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from script_narrator.analysis import VoiceAnalysisGateway
from script_narrator.cloning import VoiceCloneWorkflow
from script_narrator.constants import DEFAULT_VOICE, OUTPUT_DIR, VERSION
from script_narrator.errors import MissingCredentialError
from script_narrator.exporter import export_lines, export_narration, slugify
from script_narrator.generation import GenerationOrchestrator
from script_narrator.playback import PlaybackOrchestrator
from script_narrator.session import NarrationSession
from script_narrator.tts import SpeechSynthesisGateway

logger = logging.getLogger(__name__)


def _read_script(file_path: str) -> str:
    """Read a script file, exiting on missing or empty input."""
    if not os.path.exists(file_path):
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    with open(file_path) as f:
        text = f.read()
    if not text.strip():
        print(f"Error: File is empty: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    return text


def _parse_assignments(values: list[str] | None, option: str) -> list[tuple[str, str]]:
    """Split repeated SPEAKER=VALUE options."""
    pairs = []
    for value in values or []:
        speaker, sep, setting = value.partition("=")
        if not sep or not speaker.strip() or not setting.strip():
            print(f"Error: {option} expects SPEAKER=VALUE, got '{value}'", file=sys.stderr)
            raise SystemExit(1)
        pairs.append((speaker.strip(), setting.strip()))
    return pairs


def _update(session: NarrationSession, speaker: str, **changes) -> None:
    if speaker not in session.profiles:
        print(f"Warning: Speaker '{speaker}' not in script. Ignoring.", file=sys.stderr)
        return
    try:
        session.update_profile(speaker, **changes)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)


def _apply_voice_options(session: NarrationSession, args) -> None:
    """Apply --voice/--speed/--pitch/--volume to the session's profiles."""
    for speaker, voice_id in _parse_assignments(args.voice, "--voice"):
        if not session.catalog.is_known(voice_id):
            print(f"Error: Unknown voice: {voice_id}", file=sys.stderr)
            print(f"Valid voices: {', '.join(session.catalog.voice_ids())}", file=sys.stderr)
            raise SystemExit(1)
        _update(session, speaker, voice_id=voice_id)

    for option, field in (("--speed", "speed"), ("--pitch", "pitch"), ("--volume", "volume")):
        for speaker, raw in _parse_assignments(getattr(args, field), option):
            try:
                value = float(raw)
            except ValueError:
                print(f"Error: Invalid {field} value: {raw}", file=sys.stderr)
                raise SystemExit(1)
            _update(session, speaker, **{field: value})


async def _apply_clones(session: NarrationSession, clones: list[tuple[str, str]]) -> None:
    """Run the clone workflow for each SPEAKER=SAMPLE and assign the result."""
    if not clones:
        return
    workflow = VoiceCloneWorkflow(session.catalog, VoiceAnalysisGateway())
    for speaker, sample in clones:
        if not os.path.exists(sample):
            print(f"Error: File not found: {sample}", file=sys.stderr)
            raise SystemExit(1)
        workflow.select_sample(sample)
        description = await workflow.analyze()
        print(f"  Analyzed {os.path.basename(sample)}: {description}")
        clone = workflow.save(f"{speaker} clone")
        if clone is None:
            continue
        _update(session, speaker, clone_source_id=clone.id)
        print(f"  {speaker} → {clone.display_name} (based on {clone.base_voice_id})")


def _build_session(args) -> NarrationSession:
    session = NarrationSession()
    lines = session.set_script(_read_script(args.file))
    if not lines:
        print(f"Error: Could not parse any lines from: {args.file}", file=sys.stderr)
        print("Lines must look like 'Speaker: text' or '[Speaker: text]'.", file=sys.stderr)
        raise SystemExit(1)
    _apply_voice_options(session, args)
    return session


async def _generate(session: NarrationSession, args) -> None:
    await _apply_clones(session, _parse_assignments(args.clone, "--clone"))
    orchestrator = GenerationOrchestrator(session, SpeechSynthesisGateway())
    print(f"Generating audio for {len(session.lines)} lines...")
    await orchestrator.generate_all()


def _report_missing(session: NarrationSession) -> int:
    missing = [(i, line) for i, line in enumerate(session.lines) if not line.audio_ref]
    for i, line in missing:
        print(f"  [no audio] #{i + 1} {line.speaker}: {line.text[:50]}")
    return len(missing)


def cmd_voices(args):
    """List available voices."""
    session = NarrationSession()
    voices = session.catalog.find(args.filter)
    if not voices:
        print("No matching voices found.")
        return
    print("Available voices:")
    for v in voices:
        print(f"  {v.name:<8} {v.gender:<7} {v.style}")


def cmd_parse(args):
    """Show the lines and speakers recognised in a script."""
    session = NarrationSession()
    lines = session.set_script(_read_script(args.file))
    if not lines:
        print(f"No script lines found in: {args.file}")
        return
    print(f"Parsed {len(lines)} lines, {len(session.speakers)} speakers")
    for i, line in enumerate(lines):
        print(f"  #{i + 1:<3} {line.speaker}: {line.text}")
    print("Speakers:")
    for profile in session.profiles:
        print(f"  {profile.speaker_name:<15} → {profile.config.voice_id}")


def cmd_generate(args):
    """Generate audio for every line and export it."""
    session = _build_session(args)
    try:
        asyncio.run(_generate(session, args))
    except MissingCredentialError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    output_dir = args.output or os.path.join(OUTPUT_DIR, slugify(os.path.splitext(os.path.basename(args.file))[0]))
    paths = export_lines(session, os.path.join(output_dir, "lines"))
    narration = export_narration(session, output_dir)
    missing = _report_missing(session)

    if not paths:
        print("Error: No audio was generated.", file=sys.stderr)
        raise SystemExit(1)
    print(f"Generated {len(paths)}/{len(session.lines)} lines ({missing} without audio)")
    print(f"Done: {narration}")


async def _play(session: NarrationSession, args) -> bool:
    await _generate(session, args)
    _report_missing(session)
    player = PlaybackOrchestrator(session)
    if not await player.start():
        return False
    print(f"Playing {len(player.clips)} clips... (Ctrl-C to stop)")
    try:
        await player.wait()
    finally:
        player.stop()
        player.output.close()
    return True


def cmd_play(args):
    """Generate audio and preview the full story."""
    session = _build_session(args)
    if args.music:
        if not os.path.exists(args.music):
            print(f"Error: File not found: {args.music}", file=sys.stderr)
            raise SystemExit(1)
        session.set_background(args.music)

    try:
        played = asyncio.run(_play(session, args))
    except MissingCredentialError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    except KeyboardInterrupt:
        print("\nStopped.")
        return
    finally:
        session.close()

    if not played:
        print("Error: No audio was generated, nothing to play.", file=sys.stderr)
        raise SystemExit(1)


def cmd_analyze(args):
    """Describe a voice sample."""
    if not os.path.exists(args.sample):
        print(f"Error: File not found: {args.sample}", file=sys.stderr)
        raise SystemExit(1)
    try:
        description = asyncio.run(VoiceAnalysisGateway().analyze(args.sample))
    except MissingCredentialError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    print(description)


async def _preview(session: NarrationSession, speaker: str, voice_id: str) -> bool:
    orchestrator = GenerationOrchestrator(session, SpeechSynthesisGateway())
    data = await orchestrator.preview_voice(speaker, voice_id)
    if data is None:
        return False
    player = PlaybackOrchestrator(session)
    try:
        return await player.play_audio(data, label=f"{speaker} preview")
    finally:
        player.output.close()


def cmd_preview(args):
    """Speak a short greeting in a voice."""
    session = NarrationSession()
    if not session.catalog.is_known(args.voice):
        print(f"Error: Unknown voice: {args.voice}", file=sys.stderr)
        print(f"Valid voices: {', '.join(session.catalog.voice_ids())}", file=sys.stderr)
        raise SystemExit(1)
    try:
        ok = asyncio.run(_preview(session, args.speaker, args.voice))
    except MissingCredentialError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    if not ok:
        print("Error: Voice preview failed.", file=sys.stderr)
        raise SystemExit(1)


def _add_voice_options(parser):
    parser.add_argument("file", help="Path to the script text file")
    parser.add_argument("--voice", action="append", metavar="SPEAKER=VOICE", help="Assign a catalog voice")
    parser.add_argument("--speed", action="append", metavar="SPEAKER=X", help="Playback speed (0.5-2.0)")
    parser.add_argument("--pitch", action="append", metavar="SPEAKER=X", help="Pitch (-5-5, not applied)")
    parser.add_argument("--volume", action="append", metavar="SPEAKER=X", help="Volume (0.0-1.0)")
    parser.add_argument("--clone", action="append", metavar="SPEAKER=SAMPLE", help="Clone a voice from a sample")


def main(argv=None):
    """CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="script-narrator",
        description="Script Narrator — turn multi-speaker scripts into narrated audio",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # voices
    voices_parser = subparsers.add_parser("voices", help="List available voices")
    voices_parser.add_argument("--filter", help="Filter voices by name, gender or style")
    voices_parser.set_defaults(func=cmd_voices)

    # parse
    parse_parser = subparsers.add_parser("parse", help="Show parsed lines and speakers")
    parse_parser.add_argument("file", help="Path to the script text file")
    parse_parser.set_defaults(func=cmd_parse)

    # generate
    generate_parser = subparsers.add_parser("generate", help="Generate and export audio")
    _add_voice_options(generate_parser)
    generate_parser.add_argument("-o", "--output", help="Output directory")
    generate_parser.set_defaults(func=cmd_generate)

    # play
    play_parser = subparsers.add_parser("play", help="Generate and preview the full story")
    _add_voice_options(play_parser)
    play_parser.add_argument("--music", help="Background music file (loops at 30%% volume)")
    play_parser.set_defaults(func=cmd_play)

    # analyze
    analyze_parser = subparsers.add_parser("analyze", help="Describe a voice sample")
    analyze_parser.add_argument("sample", help="Path to an audio sample")
    analyze_parser.set_defaults(func=cmd_analyze)

    # preview
    preview_parser = subparsers.add_parser("preview", help="Hear a voice say hello")
    preview_parser.add_argument("speaker", help="Speaker name to introduce")
    preview_parser.add_argument("--voice", default=DEFAULT_VOICE, help="Catalog voice")
    preview_parser.set_defaults(func=cmd_preview)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
