from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from scriptforge.tasks.base import TaskBase, TaskContext
from scriptforge.webapi.client import WebApiClient
from scriptforge.webapi.models import UploadScriptResponse


class WebApiBaseTask(TaskBase):
    def __init__(self, web_api_client: WebApiClient) -> None:
        self.web_api_client = web_api_client

    def prepare_web_api_client(self, context: TaskContext) -> None:
        self.web_api_client.configure(context.config.web_api)

    def do_execute(self, context: TaskContext) -> int:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.do_execute_async(context))

        # Called from inside a running loop: block on a private loop in a worker thread.
        with ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, self.do_execute_async(context)).result()

    async def do_execute_async(self, context: TaskContext) -> int:
        raise NotImplementedError


class UploadScriptTask(WebApiBaseTask):
    """Uploads a build script to the build server."""

    def __init__(self, web_api_client: WebApiClient, script_file_path: str | Path) -> None:
        super().__init__(web_api_client)
        self.script_file_path = Path(script_file_path)
        self.response: UploadScriptResponse | None = None

    async def do_execute_async(self, context: TaskContext) -> int:
        self.prepare_web_api_client(context)
        context.log_info(f"uploading script '{self.script_file_path}' to {self.web_api_client.base_url}")
        self.response = await self.web_api_client.upload_script_file(self.script_file_path)
        context.log_info(f"uploaded script stored at {self.response.stored_path}")
        return 0
