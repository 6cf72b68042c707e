from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import typer

from scriptforge.analysis.engine import ScriptAnalyser
from scriptforge.config import ForgeConfig, ensure_config, load_config
from scriptforge.pipeline import ScriptAnalysisError, prepare_script, run_build
from scriptforge.tasks.base import TaskContext, TaskExecutionError
from scriptforge.tasks.file_system import CopyDirectoryStructureTask
from scriptforge.tasks.web_api import UploadScriptTask
from scriptforge.webapi.client import WebApiClient

app = typer.Typer(help="ScriptForge: build scripts with directive analysis")

DEFAULT_CONFIG_PATH = Path(".scriptforge/config.yaml")


def _absolute(repo: Path, path: Path) -> Path:
    return (repo / path).resolve() if not path.is_absolute() else path


def _fail(message: str) -> NoReturn:
    typer.echo(f"[scriptforge] error: {message}", err=True)
    raise typer.Exit(code=1)


@app.command()
def init(
    repo: Path = typer.Option(Path("."), help="Project root"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Config path"),
    force: bool = typer.Option(False, help="Overwrite existing config"),
) -> None:
    repo = repo.resolve()
    config_path = _absolute(repo, config)
    ensure_config(config_path, force=force)
    typer.echo(f"[scriptforge] initialized config at {config_path}")


@app.command()
def analyse(
    script: Path = typer.Argument(..., help="Build script to analyse"),
    repo: Path = typer.Option(Path("."), help="Project root"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Config path"),
    as_json: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
) -> None:
    repo = repo.resolve()
    config_path = _absolute(repo, config)
    script = _absolute(repo, script)
    forge_config = ForgeConfig.from_path(config_path) if config_path.exists() else ForgeConfig.default()

    try:
        analysis = prepare_script(script, ScriptAnalyser.from_config(forge_config))
    except ScriptAnalysisError as exc:
        _fail(str(exc))

    if as_json:
        typer.echo(json.dumps(analysis.to_dict(), ensure_ascii=False, indent=2))
        return

    typer.echo(f"[scriptforge] analysed {script}")
    typer.echo(f"- references: {len(analysis.result.references)}")
    for reference in analysis.result.references:
        typer.echo(f"  {reference}")
    typer.echo(f"- source files: {len(analysis.result.source_files)}")
    typer.echo(f"- packages: {len(analysis.result.package_references)}")
    typer.echo(f"- body lines: {len(analysis.body_lines)}")


@app.command()
def build(
    repo: Path = typer.Option(Path("."), help="Project root"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Config path"),
    output: Path = typer.Option(Path(".scriptforge/analysis"), help="Output directory"),
) -> None:
    repo = repo.resolve()
    config_path = _absolute(repo, config)
    output_dir = _absolute(repo, output)

    forge_config = load_config(config_path)
    try:
        result = run_build(root=repo, config=forge_config, output_dir=output_dir)
    except ScriptAnalysisError as exc:
        _fail(str(exc))

    typer.echo("[scriptforge] build complete")
    typer.echo(f"- scripts: {len(result.report.scripts)}")
    typer.echo(f"- references: {result.report.metadata['references']}")
    typer.echo(f"- report: {result.outputs['report']}")


@app.command()
def copy(
    source: Path = typer.Argument(..., help="Source directory"),
    destination: Path = typer.Argument(..., help="Destination directory"),
    include: str = typer.Option("", help="Inclusion regex for file paths"),
    exclude: str = typer.Option("", help="Exclusion regex for file and directory paths"),
    overwrite: bool = typer.Option(False, help="Overwrite existing destination files"),
) -> None:
    task = CopyDirectoryStructureTask(
        source,
        destination,
        overwrite_existing=overwrite,
        inclusion_pattern=include or None,
        exclusion_pattern=exclude or None,
    )
    try:
        task.execute(TaskContext())
    except TaskExecutionError as exc:
        _fail(str(exc))
    typer.echo(f"[scriptforge] copied {len(task.copied_files)} files")


@app.command()
def upload(
    script: Path = typer.Argument(..., help="Build script to upload"),
    repo: Path = typer.Option(Path("."), help="Project root"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Config path"),
    url: str = typer.Option("", help="Build server URL, overrides the config"),
) -> None:
    repo = repo.resolve()
    config_path = _absolute(repo, config)
    forge_config = ForgeConfig.from_path(config_path) if config_path.exists() else ForgeConfig.default()

    task = UploadScriptTask(WebApiClient(base_url=url), _absolute(repo, script))
    try:
        task.execute(TaskContext(config=forge_config))
    except TaskExecutionError as exc:
        _fail(str(exc))
    typer.echo("[scriptforge] upload complete")


@app.command()
def serve(
    repo: Path = typer.Option(Path("."), help="Project root"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Config path"),
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
) -> None:
    import uvicorn

    from scriptforge.webapi.server import create_app

    repo = repo.resolve()
    forge_config = load_config(_absolute(repo, config))
    uvicorn.run(create_app(forge_config, root=repo), host=host, port=port)


if __name__ == "__main__":
    app()
