from __future__ import annotations

from pydantic import BaseModel, Field


class UploadScriptRequest(BaseModel):
    file_name: str = Field(min_length=1)
    content: str


class PackageReferenceModel(BaseModel):
    name: str
    version: str | None = None


class UploadScriptResponse(BaseModel):
    ok: bool = True
    file_name: str
    stored_path: str
    references: list[str] = Field(default_factory=list)
    source_files: list[str] = Field(default_factory=list)
    package_references: list[PackageReferenceModel] = Field(default_factory=list)
    body_lines: int = 0
