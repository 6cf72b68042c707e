from __future__ import annotations

import json
import re
from collections.abc import Iterable
from datetime import UTC, datetime
from fnmatch import fnmatch
from pathlib import Path


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _expand_braces(pattern: str) -> list[str]:
    match = re.search(r"\{([^{}]+)\}", pattern)
    if not match:
        return [pattern]
    options = [item.strip() for item in match.group(1).split(",") if item.strip()]
    if not options:
        return [pattern]
    prefix = pattern[: match.start()]
    suffix = pattern[match.end() :]
    expanded: list[str] = []
    for option in options:
        expanded.extend(_expand_braces(f"{prefix}{option}{suffix}"))
    return expanded


def path_matches(path: str, patterns: Iterable[str]) -> bool:
    expanded_patterns: list[str] = []
    for pattern in patterns:
        expanded_patterns.extend(_expand_braces(pattern))
    return any(fnmatch(path, pattern) for pattern in expanded_patterns)


def is_included(path: str, include_patterns: list[str], exclude_patterns: list[str]) -> bool:
    include_ok = path_matches(path, include_patterns)
    exclude_hit = path_matches(path, exclude_patterns)
    return include_ok and not exclude_hit


def split_physical_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, dropping one trailing ``\\r`` per line.

    Unlike ``str.splitlines`` this keeps form feeds, ``\\u2028`` and the other
    Unicode separators inside the line they appear in.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def directive_payload(line: str) -> str | None:
    """Return the text after the first space of a directive line.

    ``None`` means the directive carries no payload: there is no space at all,
    or nothing follows it.
    """
    index = line.find(" ")
    if index < 0:
        return None
    payload = line[index + 1 :]
    if not payload:
        return None
    return payload


def resolve_script_relative(value: str, script_path: str | None) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    base = Path(script_path).parent if script_path else Path.cwd()
    return (base / path).resolve()


def write_json(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
