"""Pydantic models for the Cloud Storage JSON API object listing."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GcsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ObjectResource(GcsBaseModel):
    name: str
    # the API reports sizes as decimal strings
    size: int = 0
    updated: datetime

    @property
    def is_folder_placeholder(self) -> bool:
        return self.name.endswith("/")


class ListObjectsResponse(GcsBaseModel):
    items: list[ObjectResource] = Field(default_factory=list["ObjectResource"])
    next_page_token: str | None = Field(default=None, alias="nextPageToken")
