"""Voice cloning workflow: pick a sample, analyze it, name and save the clone."""

import logging

from script_narrator.analysis import VoiceAnalysisGateway
from script_narrator.models import ClonedVoice
from script_narrator.voices import VoiceCatalog

logger = logging.getLogger(__name__)


class VoiceCloneWorkflow:
    """Steps through sample → analysis → named clone.

    Steps invoked without their prerequisites do nothing and return None.
    """

    def __init__(self, catalog: VoiceCatalog, analyzer: VoiceAnalysisGateway):
        self.catalog = catalog
        self.analyzer = analyzer
        self.sample_path: str | None = None
        self.analysis: str | None = None
        self.analyzing = False

    def select_sample(self, path: str) -> None:
        self.sample_path = path
        self.analysis = None

    async def analyze(self) -> str | None:
        if not self.sample_path or self.analyzing or self.analysis:
            return self.analysis
        self.analyzing = True
        try:
            self.analysis = await self.analyzer.analyze(self.sample_path)
        finally:
            self.analyzing = False
        return self.analysis

    def save(self, name: str) -> ClonedVoice | None:
        if not self.analysis or not name or not name.strip():
            return None
        clone = self.catalog.create_clone(name.strip(), self.analysis)
        self.reset()
        return clone

    def reset(self) -> None:
        self.sample_path = None
        self.analysis = None
