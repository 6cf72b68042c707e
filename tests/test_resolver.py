from __future__ import annotations

import collections
import sys
from pathlib import Path

import pytest

from scriptforge.analysis.resolver import (
    ImportlibArtifactResolver,
    ManifestArtifactResolver,
    UnresolvableReference,
    build_resolver,
)
from scriptforge.config import ReferenceConfig


def test_importlib_resolver_accepts_module_names() -> None:
    location = ImportlibArtifactResolver().resolve("collections")
    assert location == str(Path(collections.__file__).resolve())


def test_importlib_resolver_uses_defining_module_of_class() -> None:
    location = ImportlibArtifactResolver().resolve("collections.OrderedDict")
    assert location == str(Path(collections.__file__).resolve())


def test_importlib_resolver_falls_back_to_interpreter_for_builtins() -> None:
    assert ImportlibArtifactResolver().resolve("builtins.int") == sys.executable


@pytest.mark.parametrize(
    "name",
    ["Totally.Bogus.Type", "json.NoSuchThing", "json..JSONDecoder", " json", "json.", ""],
)
def test_importlib_resolver_rejects_unknown_names(name: str) -> None:
    with pytest.raises(UnresolvableReference) as info:
        ImportlibArtifactResolver().resolve(name)
    assert info.value.token == name


def test_importlib_resolver_wraps_errors_raised_while_importing(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "scriptforge_failing_module.py").write_text("raise RuntimeError('boom')\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(UnresolvableReference) as info:
        ImportlibArtifactResolver().resolve("scriptforge_failing_module.Thing")

    assert info.value.token == "scriptforge_failing_module.Thing"
    assert "boom" in info.value.reason


def test_importlib_resolver_wraps_errors_raised_by_attribute_lookup(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "scriptforge_lazy_module.py").write_text(
        "def __getattr__(name):\n"
        "    if name.startswith('__'):\n"
        "        raise AttributeError(name)\n"
        "    raise ValueError(name)\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(UnresolvableReference):
        ImportlibArtifactResolver().resolve("scriptforge_lazy_module.Missing")


def test_manifest_resolver_prefers_manifest_entries() -> None:
    resolver = ManifestArtifactResolver(
        {"Vendor.Tool": "/opt/vendor/tool.dll"},
        fallback=ImportlibArtifactResolver(),
    )

    assert resolver.resolve("Vendor.Tool") == "/opt/vendor/tool.dll"
    assert resolver.resolve("builtins.str") == sys.executable


def test_manifest_resolver_without_fallback_fails_on_unknown_names() -> None:
    resolver = ManifestArtifactResolver({"Vendor.Tool": "/opt/vendor/tool.dll"})

    with pytest.raises(UnresolvableReference):
        resolver.resolve("json")


def test_build_resolver_uses_manifest_only_when_configured() -> None:
    assert isinstance(build_resolver(ReferenceConfig()), ImportlibArtifactResolver)

    resolver = build_resolver(ReferenceConfig(manifest={"A.B": "/a/b.dll"}))
    assert isinstance(resolver, ManifestArtifactResolver)
    assert resolver.resolve("A.B") == "/a/b.dll"
