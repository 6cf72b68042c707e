from __future__ import annotations

from typing import Protocol

from scriptforge.schemas import AnalysisResult


class DirectiveProcessor(Protocol):
    """Handles one directive kind.

    ``process`` returns True when the line carries this processor's marker,
    even when the payload is missing and nothing was recorded. It returns
    False, leaving ``result`` untouched, for every other line.
    """

    def process(self, result: AnalysisResult, line: str) -> bool:
        ...
