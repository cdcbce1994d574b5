from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .aws import build_dynamodb
from .settings import Settings

@dataclass(frozen=True)
class Tables:
    posts: Any
    comments: Any
    users: Any
    users_username_index: str = "username-index"

def build_tables(settings: Settings, ddb: Any = None) -> Tables:
    ddb = ddb if ddb is not None else build_dynamodb(settings)
    return Tables(
        posts=ddb.Table(settings.posts_table_name),
        comments=ddb.Table(settings.comments_table_name),
        users=ddb.Table(settings.users_table_name),
        users_username_index=settings.users_username_index,
    )
