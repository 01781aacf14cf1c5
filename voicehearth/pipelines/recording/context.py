"""Collaborators handed to every stage of a single pipeline run."""

from __future__ import annotations

from dataclasses import dataclass

from .interfaces import ArtifactSink, ByteFetcher, PageSource, TranscodingEngine
from .workspace import Workspace


@dataclass(frozen=True)
class StageContext:
    workspace: Workspace
    engine: TranscodingEngine
    fetcher: ByteFetcher
    pages: PageSource
    artifacts: ArtifactSink
    music_base_url: str | None = None


__all__ = ["StageContext"]
