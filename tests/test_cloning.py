"""Tests for the voice cloning workflow."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from script_narrator.cloning import VoiceCloneWorkflow
from script_narrator.voices import VoiceCatalog


@pytest.fixture
def analyzer():
    mock = MagicMock()
    mock.analyze = AsyncMock(return_value="A calm female voice.")
    return mock


@pytest.fixture
def workflow(analyzer):
    return VoiceCloneWorkflow(VoiceCatalog(), analyzer)


def test_full_workflow(workflow, analyzer):
    workflow.select_sample("sample.mp3")
    assert asyncio.run(workflow.analyze()) == "A calm female voice."
    analyzer.analyze.assert_awaited_once_with("sample.mp3")

    clone = workflow.save("  Heroine  ")
    assert clone.display_name == "Heroine"
    assert clone.description == "A calm female voice."
    assert workflow.catalog.clones == [clone]
    assert workflow.sample_path is None
    assert workflow.analysis is None


def test_analyze_without_sample(workflow, analyzer):
    assert asyncio.run(workflow.analyze()) is None
    analyzer.analyze.assert_not_called()


def test_analysis_not_repeated(workflow, analyzer):
    workflow.select_sample("sample.mp3")
    asyncio.run(workflow.analyze())
    asyncio.run(workflow.analyze())
    assert analyzer.analyze.await_count == 1


def test_new_sample_clears_analysis(workflow):
    workflow.select_sample("a.mp3")
    asyncio.run(workflow.analyze())
    workflow.select_sample("b.mp3")
    assert workflow.analysis is None


def test_save_requires_analysis(workflow):
    workflow.select_sample("a.mp3")
    assert workflow.save("Name") is None
    assert workflow.catalog.clones == []


def test_save_requires_name(workflow):
    workflow.select_sample("a.mp3")
    asyncio.run(workflow.analyze())
    assert workflow.save("   ") is None
    assert workflow.catalog.clones == []
    assert workflow.analysis == "A calm female voice."
