from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from scriptforge.analysis.engine import ScriptAnalyser, discover_scripts
from scriptforge.analysis.resolver import UnresolvableReference
from scriptforge.config import ForgeConfig
from scriptforge.schemas import BuildReport, ScriptAnalysis, ScriptSummary
from scriptforge.utils import split_physical_lines, utc_now_iso, write_json


class ScriptAnalysisError(RuntimeError):
    def __init__(self, script: str, token: str, line: str | None, line_number: int | None, reason: str = "") -> None:
        self.script = script
        self.token = token
        self.line = line
        self.line_number = line_number
        location = f"{script}:{line_number}" if line_number else script
        message = f"{location}: unresolvable reference {token!r}"
        if line is not None:
            message = f"{message} in line {line!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


def _find_line_number(text: str, line: str | None) -> int | None:
    if line is None:
        return None
    for line_no, candidate in enumerate(split_physical_lines(text), start=1):
        if candidate == line:
            return line_no
    return None


def prepare_text(text: str, path: Path, analyser: ScriptAnalyser) -> ScriptAnalysis:
    """Analyse ``text`` as the content of the script at ``path``.

    The file itself does not have to exist yet.
    """
    try:
        return analyser.analyse(text, script_path=str(path.resolve()))
    except UnresolvableReference as exc:
        raise ScriptAnalysisError(
            script=str(path),
            token=exc.token,
            line=exc.line,
            line_number=_find_line_number(text, exc.line),
            reason=exc.reason,
        ) from exc


def prepare_script(path: Path, analyser: ScriptAnalyser) -> ScriptAnalysis:
    return prepare_text(path.read_text(encoding="utf-8"), path, analyser)


@dataclass(slots=True)
class BuildResult:
    report: BuildReport
    analyses: dict[str, ScriptAnalysis]
    outputs: dict[str, Path]


def run_build(root: Path, config: ForgeConfig, output_dir: Path) -> BuildResult:
    analyser = ScriptAnalyser.from_config(config)
    scripts = discover_scripts(root, config)

    report = BuildReport(root=str(root), generated_at=utc_now_iso())
    analyses: dict[str, ScriptAnalysis] = {}
    outputs: dict[str, Path] = {}

    for rel in scripts:
        analysis = prepare_script(root / rel, analyser)
        body_path = output_dir / "scripts" / rel
        body_path.parent.mkdir(parents=True, exist_ok=True)
        body_path.write_text(analysis.body + "\n" if analysis.body_lines else "", encoding="utf-8")

        analyses[rel] = analysis
        outputs[rel] = body_path
        report.scripts.append(
            ScriptSummary(
                path=rel,
                body_path=str(body_path),
                body_lines=len(analysis.body_lines),
                references=list(analysis.result.references),
                source_files=list(analysis.result.source_files),
                package_references=list(analysis.result.package_references),
            )
        )

    report.metadata["scripts"] = len(scripts)
    report.metadata["references"] = sum(len(item.references) for item in report.scripts)

    report_path = output_dir / "analysis.json"
    write_json(report_path, report.to_dict())
    outputs["report"] = report_path

    return BuildResult(report=report, analyses=analyses, outputs=outputs)
