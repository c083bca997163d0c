"""Pydantic views over Render REST API payloads.

Render has returned collections both as a bare list of wrapped items
(``[{"service": {...}, "cursor": "..."}]``) and as an envelope
(``{"services": [...]}``); :func:`unwrap_collection` accepts either.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServiceDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: Optional[str] = None
    build_command: Optional[str] = Field(default=None, alias="buildCommand")
    start_command: Optional[str] = Field(default=None, alias="startCommand")
    publish_path: Optional[str] = Field(default=None, alias="publishPath")


class Service(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    type: str = ""
    status: Optional[str] = None
    slug: Optional[str] = None
    environment: Optional[str] = None
    suspended: Optional[str] = None
    service_details: ServiceDetails = Field(
        default_factory=ServiceDetails, alias="serviceDetails"
    )

    @field_validator("service_details", mode="before")
    @classmethod
    def _default_details(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("suspended", mode="before")
    @classmethod
    def _normalize_suspended(cls, value: Any) -> Optional[str]:
        if value is None or value is False:
            return None
        return str(value)

    @property
    def is_suspended(self) -> bool:
        return self.suspended not in (None, "", "not_suspended")

    def matches(self, keyword: str) -> bool:
        return keyword.lower() in self.name.lower()


class Deploy(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    status: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    finished_at: Optional[str] = Field(default=None, alias="finishedAt")
    commit_id: Optional[str] = Field(default=None, alias="commitId")
    commit_message: Optional[str] = Field(default=None, alias="commitMessage")

    @classmethod
    def from_payload(cls, payload: Any) -> "Deploy":
        if isinstance(payload, dict):
            commit = payload.get("commit")
            if isinstance(commit, dict):
                payload = {
                    "commitId": commit.get("id"),
                    "commitMessage": commit.get("message"),
                    **payload,
                }
        return cls.model_validate(payload)


class LogEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    timestamp: Optional[str] = None
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: Any) -> str:
        return "" if value is None else str(value)


def unwrap_collection(payload: Any, key: str) -> list[dict[str, Any]]:
    """Return the entity dicts of a Render collection response.

    ``key`` is the plural envelope name (``"services"``); its singular form
    is the per-item wrapper name.
    """

    singular = key[:-1] if key.endswith("s") else key
    if isinstance(payload, dict):
        items = payload.get(key) or []
    elif isinstance(payload, list):
        items = payload
    else:
        items = []

    entities: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        wrapped = item.get(singular)
        entities.append(wrapped if isinstance(wrapped, dict) else item)
    return entities


__all__ = [
    "Deploy",
    "LogEntry",
    "Service",
    "ServiceDetails",
    "unwrap_collection",
]
