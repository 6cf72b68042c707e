from __future__ import annotations

from pathlib import Path

import httpx

from scriptforge.config import WebApiConfig
from scriptforge.webapi.models import UploadScriptRequest, UploadScriptResponse

UPLOAD_SCRIPT_PATH = "/api/scripts/upload"
DEFAULT_TIMEOUT = 30.0


class WebApiError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class WebApiClient:
    def __init__(
        self,
        base_url: str = "",
        api_key: str = "",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def configure(self, config: WebApiConfig) -> None:
        """Fill connection settings that were not given explicitly."""
        if not self.base_url:
            self.base_url = config.endpoint
        if not self.api_key:
            self.api_key = config.api_key
        if self.timeout is None:
            self.timeout = config.timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def upload_script(self, request: UploadScriptRequest) -> UploadScriptResponse:
        if not self.base_url:
            raise WebApiError("web api endpoint is not configured")

        url = f"{self.base_url.rstrip('/')}{UPLOAD_SCRIPT_PATH}"
        timeout = self.timeout if self.timeout is not None else DEFAULT_TIMEOUT
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.post(url, headers=self._headers(), json=request.model_dump())
        except httpx.HTTPError as exc:
            raise WebApiError(f"upload of {request.file_name} failed: {exc}") from exc

        if response.is_error:
            raise WebApiError(
                f"upload of {request.file_name} failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return UploadScriptResponse.model_validate(response.json())

    async def upload_script_file(self, path: Path) -> UploadScriptResponse:
        request = UploadScriptRequest(file_name=path.name, content=path.read_text(encoding="utf-8"))
        return await self.upload_script(request)
