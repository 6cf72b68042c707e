from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from scriptforge.analysis.engine import ScriptAnalyser, discover_scripts
from scriptforge.config import ForgeConfig
from scriptforge.pipeline import ScriptAnalysisError, prepare_script, run_build


def _sample_repo(tmp_path: Path) -> Path:
    fixture = Path(__file__).parent / "fixtures" / "sample_scripts"
    repo = tmp_path / "repo"
    shutil.copytree(fixture, repo)
    return repo


def test_discover_scripts_honours_include_and_exclude(tmp_path: Path) -> None:
    repo = _sample_repo(tmp_path)
    (repo / ".scriptforge" / "uploads").mkdir(parents=True)
    (repo / ".scriptforge" / "uploads" / "old.csx").write_text("x\n", encoding="utf-8")
    (repo / "notes.txt").write_text("not a script\n", encoding="utf-8")

    scripts = discover_scripts(repo, ForgeConfig.default())

    assert scripts == ["build.csx", "helpers/paths.csx"]


def test_prepare_script_reports_script_and_line(tmp_path: Path) -> None:
    script = tmp_path / "broken.csx"
    script.write_text("x = 1;\n//#ref Totally.Bogus.Type\n", encoding="utf-8")

    with pytest.raises(ScriptAnalysisError) as info:
        prepare_script(script, ScriptAnalyser())

    error = info.value
    assert error.token == "Totally.Bogus.Type"
    assert error.line_number == 2
    assert error.line == "//#ref Totally.Bogus.Type"
    assert str(script) in str(error)
    assert "//#ref Totally.Bogus.Type" in str(error)


def test_prepare_script_counts_physical_lines_only(tmp_path: Path) -> None:
    script = tmp_path / "broken.csx"
    script.write_text('s = "a\u2028b\x0cc";\n//#ref Totally.Bogus.Type\n', encoding="utf-8")

    with pytest.raises(ScriptAnalysisError) as info:
        prepare_script(script, ScriptAnalyser())

    assert info.value.line_number == 2


def test_run_build_writes_bodies_and_report(tmp_path: Path) -> None:
    repo = _sample_repo(tmp_path)
    output = repo / ".scriptforge" / "analysis"

    result = run_build(root=repo, config=ForgeConfig.default(), output_dir=output)

    assert sorted(result.analyses) == ["build.csx", "helpers/paths.csx"]
    body = (output / "scripts" / "build.csx").read_text(encoding="utf-8")
    assert "//#" not in body
    assert body.startswith("using System;\n")

    report = json.loads((output / "analysis.json").read_text(encoding="utf-8"))
    assert report["metadata"] == {"scripts": 2, "references": 1}
    build_entry = next(item for item in report["scripts"] if item["path"] == "build.csx")
    assert build_entry["package_references"] == [{"name": "requests", "version": "2.31.0"}]
    assert build_entry["body_lines"] == 3


def test_run_build_stops_on_unresolvable_reference(tmp_path: Path) -> None:
    repo = _sample_repo(tmp_path)
    (repo / "zz_broken.csx").write_text("//#ref Totally.Bogus.Type\n", encoding="utf-8")
    output = repo / ".scriptforge" / "analysis"

    with pytest.raises(ScriptAnalysisError):
        run_build(root=repo, config=ForgeConfig.default(), output_dir=output)

    assert not (output / "analysis.json").exists()
