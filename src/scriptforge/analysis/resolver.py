from __future__ import annotations

import importlib
import sys
from pathlib import Path
from types import ModuleType
from typing import Protocol

from scriptforge.config import ReferenceConfig


class UnresolvableReference(RuntimeError):
    def __init__(self, token: str, line: str | None = None, reason: str = "") -> None:
        self.token = token
        self.line = line
        self.reason = reason
        message = f"cannot resolve reference {token!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ArtifactResolver(Protocol):
    def resolve(self, name: str) -> str:
        ...


def _module_location(module: ModuleType) -> str:
    location = getattr(module, "__file__", None)
    if location:
        return str(Path(location).resolve())
    # Built into the interpreter binary.
    return sys.executable


def _import_longest_prefix(parts: list[str]) -> tuple[ModuleType, list[str]]:
    for index in range(len(parts), 0, -1):
        candidate = ".".join(parts[:index])
        try:
            module = importlib.import_module(candidate)
        except ImportError:
            continue
        except Exception as exc:  # noqa: BLE001
            raise UnresolvableReference(".".join(parts), reason=f"importing {candidate} failed: {exc!r}") from exc
        return module, parts[index:]
    raise LookupError(f"no importable module in {'.'.join(parts)!r}")


class ImportlibArtifactResolver:
    """Resolve dotted names against the modules importable by this interpreter.

    ``json.JSONDecoder`` resolves to the file of ``json.decoder`` because that
    is the module the class reports as its defining one.
    """

    def resolve(self, name: str) -> str:
        parts = name.split(".")
        if not all(part.isidentifier() for part in parts):
            raise UnresolvableReference(name, reason="not a qualified name")

        try:
            module, attributes = _import_longest_prefix(parts)
        except LookupError as exc:
            raise UnresolvableReference(name, reason=str(exc)) from exc

        target: object = module
        for attribute in attributes:
            try:
                target = getattr(target, attribute)
            except AttributeError as exc:
                raise UnresolvableReference(name, reason=f"{attribute!r} not found") from exc
            except Exception as exc:  # noqa: BLE001
                raise UnresolvableReference(name, reason=f"looking up {attribute!r} failed: {exc!r}") from exc

        if isinstance(target, ModuleType):
            return _module_location(target)

        defining_name = getattr(target, "__module__", None) or module.__name__
        defining = sys.modules.get(defining_name)
        if defining is None:
            try:
                defining = importlib.import_module(defining_name)
            except Exception:  # noqa: BLE001
                defining = module
        return _module_location(defining)


class ManifestArtifactResolver:
    def __init__(self, manifest: dict[str, str], fallback: ArtifactResolver | None = None) -> None:
        self.manifest = dict(manifest)
        self.fallback = fallback

    def resolve(self, name: str) -> str:
        if name in self.manifest:
            return self.manifest[name]
        if self.fallback is None:
            raise UnresolvableReference(name, reason="not listed in the reference manifest")
        return self.fallback.resolve(name)


def build_resolver(config: ReferenceConfig) -> ArtifactResolver:
    importlib_resolver = ImportlibArtifactResolver()
    if not config.manifest:
        return importlib_resolver
    return ManifestArtifactResolver(config.manifest, fallback=importlib_resolver)
