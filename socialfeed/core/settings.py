from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple


def _flag(value: str) -> bool:
    return value not in ("0", "false", "False", "")


@dataclass(frozen=True)
class Settings:
    # AWS / DynamoDB
    aws_region: str = "us-east-1"
    dynamodb_endpoint_url: Optional[str] = None

    posts_table_name: str = "posts"
    comments_table_name: str = "comments"
    users_table_name: str = "users"
    users_username_index: str = "username-index"

    # Auth; an empty secret enables the unverified dev fallback
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"

    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))

    log_level: str = "INFO"
    log_format: str = "json"

    metrics_enabled: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = tuple(o.strip() for o in env.get("CORS_ORIGINS", "*").split(",") if o.strip())
        return cls(
            aws_region=env.get("AWS_REGION", "us-east-1"),
            dynamodb_endpoint_url=env.get("DYNAMODB_ENDPOINT_URL") or None,
            posts_table_name=env.get("POSTS_TABLE_NAME", "posts"),
            comments_table_name=env.get("COMMENTS_TABLE_NAME", "comments"),
            users_table_name=env.get("USERS_TABLE_NAME", "users"),
            users_username_index=env.get("USERS_USERNAME_INDEX", "username-index"),
            jwt_secret=env.get("JWT_SECRET", ""),
            jwt_algorithm=env.get("JWT_ALGORITHM", "HS256"),
            cors_origins=origins or ("*",),
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "json").lower(),
            metrics_enabled=_flag(env.get("METRICS_ENABLED", "1")),
        )
