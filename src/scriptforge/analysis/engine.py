from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from scriptforge.analysis.common import DirectiveProcessor
from scriptforge.analysis.file_directives import AssemblyDirectiveProcessor, ImportDirectiveProcessor
from scriptforge.analysis.package_directive import PackageDirectiveProcessor
from scriptforge.analysis.reference_directive import ReferenceDirectiveProcessor
from scriptforge.analysis.resolver import ArtifactResolver, ImportlibArtifactResolver, build_resolver
from scriptforge.config import ForgeConfig
from scriptforge.schemas import AnalysisResult, ScriptAnalysis
from scriptforge.utils import is_included, split_physical_lines


def default_processors(resolver: ArtifactResolver | None = None) -> tuple[DirectiveProcessor, ...]:
    return (
        ReferenceDirectiveProcessor(resolver or ImportlibArtifactResolver()),
        AssemblyDirectiveProcessor(),
        ImportDirectiveProcessor(),
        PackageDirectiveProcessor(),
    )


class ScriptAnalyser:
    """Splits a script into directive metadata and the body left for the compiler.

    Errors raised by a processor are not caught here: a script with an
    unresolvable directive produces no analysis at all.
    """

    def __init__(self, processors: Iterable[DirectiveProcessor] | None = None) -> None:
        self.processors: tuple[DirectiveProcessor, ...] = (
            tuple(processors) if processors is not None else default_processors()
        )

    @classmethod
    def from_config(cls, config: ForgeConfig) -> ScriptAnalyser:
        return cls(default_processors(build_resolver(config.references)))

    def _dispatch(self, result: AnalysisResult, line: str) -> bool:
        for processor in self.processors:
            if processor.process(result, line):
                return True
        return False

    def analyse_lines(self, lines: Iterable[str], script_path: str | None = None) -> ScriptAnalysis:
        result = AnalysisResult(script_path=script_path)
        body_lines: list[str] = []
        for line in lines:
            if not self._dispatch(result, line):
                body_lines.append(line)
        return ScriptAnalysis(result=result, body_lines=body_lines)

    def analyse(self, text: str, script_path: str | None = None) -> ScriptAnalysis:
        return self.analyse_lines(split_physical_lines(text), script_path=script_path)

    def analyse_file(self, path: Path) -> ScriptAnalysis:
        text = path.read_text(encoding="utf-8")
        return self.analyse(text, script_path=str(path.resolve()))


def discover_scripts(root: Path, config: ForgeConfig) -> list[str]:
    files: list[str] = []
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        rel = path.relative_to(root).as_posix()
        if is_included(rel, config.include, config.exclude):
            files.append(rel)
    return sorted(files)
