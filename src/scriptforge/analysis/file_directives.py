from __future__ import annotations

from pathlib import Path

from scriptforge.analysis.resolver import UnresolvableReference
from scriptforge.schemas import AnalysisResult
from scriptforge.utils import directive_payload, resolve_script_relative

ASSEMBLY_MARKER = "//#ass"
IMPORT_MARKER = "//#imp"


def _existing_file(token: str, line: str, script_path: str | None, root: Path | None) -> str:
    path = resolve_script_relative(token, script_path)
    if root is not None and not path.resolve().is_relative_to(root):
        raise UnresolvableReference(token, line=line, reason=f"path outside {root}")
    if not path.is_file():
        raise UnresolvableReference(token, line=line, reason=f"file not found: {path}")
    return str(path)


class AssemblyDirectiveProcessor:
    """``//#ass path/to/artifact`` references a compiled artifact by location.

    With ``root`` set, only files below that directory are accepted.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root.resolve() if root is not None else None

    def process(self, result: AnalysisResult, line: str) -> bool:
        if not line.startswith(ASSEMBLY_MARKER):
            return False

        token = directive_payload(line)
        if token is None:
            return True

        result.references.append(_existing_file(token, line, result.script_path, self.root))
        return True


class ImportDirectiveProcessor:
    """``//#imp path/to/helpers`` compiles another source file with the script."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root.resolve() if root is not None else None

    def process(self, result: AnalysisResult, line: str) -> bool:
        if not line.startswith(IMPORT_MARKER):
            return False

        token = directive_payload(line)
        if token is None:
            return True

        result.source_files.append(_existing_file(token, line, result.script_path, self.root))
        return True
