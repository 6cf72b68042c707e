from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


class Serializable:
    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class PackageReference(Serializable):
    name: str
    version: str | None = None


@dataclass(slots=True)
class AnalysisResult(Serializable):
    """Metadata collected from the directive lines of one script.

    Processors only ever append to the lists, so their order is the order in
    which the directive lines appear in the script.
    """

    script_path: str | None = None
    references: list[str] = field(default_factory=list)
    source_files: list[str] = field(default_factory=list)
    package_references: list[PackageReference] = field(default_factory=list)


@dataclass(slots=True)
class ScriptAnalysis(Serializable):
    result: AnalysisResult
    body_lines: list[str] = field(default_factory=list)

    @property
    def references(self) -> list[str]:
        return self.result.references

    @property
    def body(self) -> str:
        return "\n".join(self.body_lines)


@dataclass(slots=True)
class ScriptSummary(Serializable):
    path: str
    body_path: str
    body_lines: int
    references: list[str] = field(default_factory=list)
    source_files: list[str] = field(default_factory=list)
    package_references: list[PackageReference] = field(default_factory=list)


@dataclass(slots=True)
class BuildReport(Serializable):
    root: str
    generated_at: str
    scripts: list[ScriptSummary] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
