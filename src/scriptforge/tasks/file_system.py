from __future__ import annotations

import re
import shutil
from pathlib import Path

from scriptforge.tasks.base import TaskBase, TaskContext


class CopyDirectoryStructureTask(TaskBase):
    """Copies a directory tree from the source to the destination.

    ``inclusion_pattern`` and ``exclusion_pattern`` are case-insensitive
    regular expressions searched in full paths. A directory matching the
    exclusion pattern is skipped with everything below it; a file is copied
    only when it matches the inclusion pattern (if set) and not the
    exclusion pattern (if set).
    """

    def __init__(
        self,
        source_path: str | Path,
        destination_path: str | Path,
        overwrite_existing: bool = False,
        inclusion_pattern: str | None = None,
        exclusion_pattern: str | None = None,
    ) -> None:
        self.source_path = Path(source_path)
        self.destination_path = Path(destination_path)
        self.overwrite_existing = overwrite_existing
        self.inclusion_pattern = inclusion_pattern
        self.exclusion_pattern = exclusion_pattern
        self.copied_files: list[str] = []

    @classmethod
    def run(
        cls,
        context: TaskContext,
        source_path: str | Path,
        destination_path: str | Path,
        overwrite_existing: bool = False,
    ) -> CopyDirectoryStructureTask:
        task = cls(source_path, destination_path, overwrite_existing)
        task.execute(context)
        return task

    def do_execute(self, context: TaskContext) -> int:
        context.log_info(f"copy directory structure from '{self.source_path}' to '{self.destination_path}'")
        self.copied_files = []

        flags = re.IGNORECASE | re.DOTALL
        inclusion = re.compile(self.inclusion_pattern, flags) if self.inclusion_pattern is not None else None
        exclusion = re.compile(self.exclusion_pattern, flags) if self.exclusion_pattern is not None else None

        self._copy_recursive(context, self.source_path.resolve(), self.destination_path, inclusion, exclusion)
        return 0

    def _copy_recursive(
        self,
        context: TaskContext,
        source: Path,
        destination: Path,
        inclusion: re.Pattern[str] | None,
        exclusion: re.Pattern[str] | None,
    ) -> None:
        if exclusion is not None and exclusion.search(str(source)):
            return

        for entry in sorted(source.iterdir()):
            if entry.is_dir():
                self._copy_recursive(context, entry, destination / entry.name, inclusion, exclusion)
                continue

            full_name = str(entry)
            if inclusion is not None and not inclusion.search(full_name):
                continue
            if exclusion is not None and exclusion.search(full_name):
                continue

            target = destination / entry.name
            if target.exists() and not self.overwrite_existing:
                raise FileExistsError(f"destination file already exists: {target}")

            destination.mkdir(parents=True, exist_ok=True)
            shutil.copy2(entry, target)
            context.log_info(f"copied file '{full_name}' to '{target}'")
            self.copied_files.append(str(target))
