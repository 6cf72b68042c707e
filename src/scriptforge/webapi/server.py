from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, Header, HTTPException

from scriptforge.analysis.engine import ScriptAnalyser
from scriptforge.analysis.file_directives import AssemblyDirectiveProcessor, ImportDirectiveProcessor
from scriptforge.analysis.package_directive import PackageDirectiveProcessor
from scriptforge.analysis.reference_directive import ReferenceDirectiveProcessor
from scriptforge.analysis.resolver import ImportlibArtifactResolver, ManifestArtifactResolver
from scriptforge.config import ForgeConfig
from scriptforge.pipeline import ScriptAnalysisError, prepare_text
from scriptforge.webapi.models import PackageReferenceModel, UploadScriptRequest, UploadScriptResponse


def _scripts_dir(config: ForgeConfig, root: Path) -> Path:
    raw = Path(config.server.scripts_dir)
    return raw if raw.is_absolute() else (root / raw).resolve()


def _safe_file_name(file_name: str) -> str:
    if "/" in file_name or "\\" in file_name or file_name in {".", ".."}:
        raise HTTPException(status_code=400, detail=f"file_name must not contain path separators: {file_name}")
    return file_name


def build_server_analyser(config: ForgeConfig, scripts_dir: Path) -> ScriptAnalyser:
    """Analyser for scripts coming from the network.

    References resolve through the configured manifest only, unless
    ``server.allow_imports`` is set; file directives stay inside ``scripts_dir``.
    """
    fallback = ImportlibArtifactResolver() if config.server.allow_imports else None
    resolver = ManifestArtifactResolver(config.references.manifest, fallback=fallback)
    return ScriptAnalyser(
        (
            ReferenceDirectiveProcessor(resolver),
            AssemblyDirectiveProcessor(root=scripts_dir),
            ImportDirectiveProcessor(root=scripts_dir),
            PackageDirectiveProcessor(),
        )
    )


def create_app(config: ForgeConfig | None = None, root: Path | None = None) -> FastAPI:
    config = config or ForgeConfig.default()
    root = (root or Path.cwd()).resolve()
    scripts_dir = _scripts_dir(config, root)
    analyser = build_server_analyser(config, scripts_dir)

    app = FastAPI(title="ScriptForge Build Server API", version="0.1.0")

    def _check_api_key(authorization: str | None) -> None:
        if not config.web_api.api_key:
            return
        if authorization != f"Bearer {config.web_api.api_key}":
            raise HTTPException(status_code=401, detail="invalid or missing api key")

    @app.get("/api/health")
    def health() -> dict:
        return {
            "status": "ok",
            "service": "scriptforge-build-server",
            "scripts_dir": str(scripts_dir),
        }

    @app.post("/api/scripts/upload", response_model=UploadScriptResponse)
    def upload_script(
        payload: UploadScriptRequest,
        authorization: str | None = Header(default=None),
    ) -> UploadScriptResponse:
        _check_api_key(authorization)
        file_name = _safe_file_name(payload.file_name)
        stored = scripts_dir / file_name

        try:
            analysis = prepare_text(payload.content, stored, analyser)
        except ScriptAnalysisError as exc:
            raise HTTPException(
                status_code=422,
                detail={
                    "message": str(exc),
                    "token": exc.token,
                    "line": exc.line,
                    "line_number": exc.line_number,
                },
            ) from exc

        scripts_dir.mkdir(parents=True, exist_ok=True)
        stored.write_text(payload.content, encoding="utf-8")

        return UploadScriptResponse(
            file_name=file_name,
            stored_path=str(stored),
            references=analysis.result.references,
            source_files=analysis.result.source_files,
            package_references=[
                PackageReferenceModel(name=item.name, version=item.version)
                for item in analysis.result.package_references
            ],
            body_lines=len(analysis.body_lines),
        )

    return app
