from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG = """include:
  - "*.{csx,py,build}"
  - "**/*.{csx,py,build}"
exclude:
  - "**/.git/**"
  - "**/.venv/**"
  - "**/__pycache__/**"
  - "**/.pytest_cache/**"
  - ".scriptforge/**"
  - "**/.scriptforge/**"
  - "**/node_modules/**"
  - "**/dist/**"
  - "**/build/**"
references:
  manifest: {}
web_api:
  endpoint: "http://127.0.0.1:8000"
  api_key: ""
  timeout: 30.0
server:
  scripts_dir: ".scriptforge/uploads"
  allow_imports: false
"""


@dataclass(slots=True)
class ReferenceConfig:
    manifest: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class WebApiConfig:
    endpoint: str = "http://127.0.0.1:8000"
    api_key: str = ""
    timeout: float = 30.0


@dataclass(slots=True)
class ServerConfig:
    scripts_dir: str = ".scriptforge/uploads"
    allow_imports: bool = False


@dataclass(slots=True)
class ForgeConfig:
    include: list[str]
    exclude: list[str]
    references: ReferenceConfig
    web_api: WebApiConfig
    server: ServerConfig

    @classmethod
    def default(cls) -> ForgeConfig:
        data = yaml.safe_load(DEFAULT_CONFIG)
        return cls.from_dict(data)

    @classmethod
    def from_path(cls, path: Path) -> ForgeConfig:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ForgeConfig:
        references_data = data.get("references") or {}
        references = ReferenceConfig(
            manifest={str(key): str(value) for key, value in (references_data.get("manifest") or {}).items()},
        )

        web_api_data = data.get("web_api") or {}
        web_api = WebApiConfig(
            endpoint=web_api_data.get("endpoint", "http://127.0.0.1:8000"),
            api_key=web_api_data.get("api_key", ""),
            timeout=float(web_api_data.get("timeout", 30.0)),
        )

        server_data = data.get("server") or {}
        server = ServerConfig(
            scripts_dir=server_data.get("scripts_dir", ".scriptforge/uploads"),
            allow_imports=bool(server_data.get("allow_imports", False)),
        )

        env_endpoint = os.getenv("SCRIPTFORGE_WEBAPI_URL", "").strip()
        env_api_key = os.getenv("SCRIPTFORGE_WEBAPI_KEY", "").strip()
        env_timeout = os.getenv("SCRIPTFORGE_WEBAPI_TIMEOUT", "").strip()
        env_scripts_dir = os.getenv("SCRIPTFORGE_SCRIPTS_DIR", "").strip()

        if env_endpoint:
            web_api.endpoint = env_endpoint
        if env_api_key:
            web_api.api_key = env_api_key
        if env_timeout:
            try:
                web_api.timeout = float(env_timeout)
            except ValueError:
                pass
        if env_scripts_dir:
            server.scripts_dir = env_scripts_dir

        return cls(
            include=data.get("include", ["*.{csx,py,build}", "**/*.{csx,py,build}"]),
            exclude=data.get("exclude", ["**/.git/**", "**/.venv/**", "**/.scriptforge/**"]),
            references=references,
            web_api=web_api,
            server=server,
        )


def ensure_config(path: Path, force: bool = False) -> None:
    if path.exists() and not force:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG, encoding="utf-8")


def load_config(path: Path) -> ForgeConfig:
    if not path.exists():
        ensure_config(path)
    return ForgeConfig.from_path(path)
