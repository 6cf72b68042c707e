from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import typer

from scriptforge.config import ForgeConfig


class TaskExecutionError(RuntimeError):
    def __init__(self, task_name: str, cause: Exception) -> None:
        self.task_name = task_name
        self.cause = cause
        super().__init__(f"task {task_name} failed: {cause}")


@dataclass(slots=True)
class TaskContext:
    config: ForgeConfig = field(default_factory=ForgeConfig.default)
    messages: list[str] = field(default_factory=list)

    def log_info(self, message: str) -> None:
        self.messages.append(message)
        typer.echo(f"[scriptforge] {message}")


class TaskBase:
    """Base class of every build step.

    Subclasses implement ``do_execute``; tasks whose work is naturally
    asynchronous also override ``do_execute_async``.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    def do_execute(self, context: TaskContext) -> int:
        raise NotImplementedError

    async def do_execute_async(self, context: TaskContext) -> int:
        return await asyncio.to_thread(self.do_execute, context)

    def execute(self, context: TaskContext) -> int:
        try:
            return self.do_execute(context)
        except TaskExecutionError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise TaskExecutionError(self.name, exc) from exc

    async def execute_async(self, context: TaskContext) -> int:
        try:
            return await self.do_execute_async(context)
        except TaskExecutionError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise TaskExecutionError(self.name, exc) from exc
