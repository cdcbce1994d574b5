from __future__ import annotations

from typing import Any, Dict, List, Tuple

from boto3.dynamodb.conditions import Key

from socialfeed.core.pagination import PageWindow
from socialfeed.core.tables import Tables
from socialfeed.services.store import count_items, query_page
from socialfeed.services.users import usernames_for


def populate_usernames(tables: Tables, comments: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    names = usernames_for(tables, [c.get("user_id") for c in comments])
    return [{**c, "username": names.get(c.get("user_id"))} for c in comments]


def list_post_comments(tables: Tables, post_id: str, window: PageWindow) -> Tuple[List[Dict[str, Any]], int]:
    cond = Key("post_id").eq(post_id)
    comments = query_page(tables.comments, skip=window.skip, limit=window.limit, KeyConditionExpression=cond)
    total = count_items(tables.comments, KeyConditionExpression=cond)
    return populate_usernames(tables, comments), total
