from __future__ import annotations

import json.decoder
import sys
from pathlib import Path

import pytest

from scriptforge.analysis.reference_directive import ReferenceDirectiveProcessor
from scriptforge.analysis.resolver import ImportlibArtifactResolver, UnresolvableReference
from scriptforge.schemas import AnalysisResult


class RecordingResolver:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def resolve(self, name: str) -> str:
        self.calls.append(name)
        return f"/artifacts/{name}.so"


def test_ignores_lines_without_marker() -> None:
    resolver = RecordingResolver()
    processor = ReferenceDirectiveProcessor(resolver)
    result = AnalysisResult()

    for line in ["", "x = 1;", " //#ref json", "//#REF json", "// #ref json"]:
        assert processor.process(result, line) is False

    assert result.references == []
    assert resolver.calls == []


def test_appends_location_of_defining_module() -> None:
    processor = ReferenceDirectiveProcessor(ImportlibArtifactResolver())
    result = AnalysisResult()

    assert processor.process(result, "//#ref json.JSONDecoder") is True

    assert result.references == [str(Path(json.decoder.__file__).resolve())]


def test_payload_is_text_after_first_space() -> None:
    resolver = RecordingResolver()
    processor = ReferenceDirectiveProcessor(resolver)
    result = AnalysisResult()

    processor.process(result, "//#ref pkg.Type extra")

    assert resolver.calls == ["pkg.Type extra"]
    assert result.references == ["/artifacts/pkg.Type extra.so"]


def test_whitespace_payload_is_passed_to_resolver_and_fails() -> None:
    processor = ReferenceDirectiveProcessor(ImportlibArtifactResolver())
    result = AnalysisResult()

    with pytest.raises(UnresolvableReference) as info:
        processor.process(result, "//#ref   ")

    assert info.value.token == "  "
    assert result.references == []


@pytest.mark.parametrize("line", ["//#ref", "//#ref "])
def test_marker_without_payload_is_consumed_silently(line: str) -> None:
    resolver = RecordingResolver()
    processor = ReferenceDirectiveProcessor(resolver)
    result = AnalysisResult()

    assert processor.process(result, line) is True
    assert result.references == []
    assert resolver.calls == []


def test_builtin_type_resolves_to_interpreter() -> None:
    processor = ReferenceDirectiveProcessor(ImportlibArtifactResolver())
    result = AnalysisResult()

    processor.process(result, "//#ref builtins.str")

    assert result.references == [sys.executable]


def test_unknown_type_raises_with_token_and_line() -> None:
    processor = ReferenceDirectiveProcessor(ImportlibArtifactResolver())
    result = AnalysisResult()

    with pytest.raises(UnresolvableReference) as info:
        processor.process(result, "//#ref Totally.Bogus.Type")

    assert info.value.token == "Totally.Bogus.Type"
    assert info.value.line == "//#ref Totally.Bogus.Type"
    assert result.references == []
