from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from socialfeed.core.normalize import normalize_first_name, normalize_last_name, normalize_username


def now_ms() -> int:
    return int(time.time() * 1000)


# -----------------------------
# Requests
# -----------------------------
class UpdateUsernameReq(BaseModel):
    username: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("username", mode="before")
    @classmethod
    def _username(cls, v):
        return normalize_username(v)


class UpdateNameReq(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("first_name", mode="before")
    @classmethod
    def _first_name(cls, v):
        return None if v is None else normalize_first_name(v)

    @field_validator("last_name", mode="before")
    @classmethod
    def _last_name(cls, v):
        return None if v is None else normalize_last_name(v)


# -----------------------------
# Envelopes
# -----------------------------
class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(_Wire):
    message: str
    code: int
    timestamp: Optional[int] = Field(default_factory=now_ms)


class ErrorEnvelope(Envelope):
    pass


class PostsPage(_Wire):
    posts: List[Dict[str, Any]]
    current_page: int
    total_pages: int
    total_posts: int


class CommentsPage(_Wire):
    comments: List[Dict[str, Any]]
    current_page: int
    total_pages: int
    total_comments: int


class UsernameData(_Wire):
    username: str


class NameData(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class PostsEnvelope(Envelope):
    data: PostsPage


class CommentsEnvelope(Envelope):
    data: CommentsPage


class UsernameEnvelope(Envelope):
    data: UsernameData


class NameEnvelope(Envelope):
    data: NameData


def envelope_body(env: Envelope) -> Dict[str, Any]:
    return env.model_dump(mode="json", by_alias=True, exclude_none=True)
