from __future__ import annotations

from typing import Any, Dict, List, Tuple

from boto3.dynamodb.conditions import Key

from socialfeed.core.pagination import PageWindow
from socialfeed.core.tables import Tables
from socialfeed.services.store import count_items, query_page


def list_user_posts(tables: Tables, user_id: str, window: PageWindow) -> Tuple[List[Dict[str, Any]], int]:
    """One page of ``user_id``'s posts plus the user's total post count."""
    cond = Key("user_id").eq(user_id)
    posts = query_page(tables.posts, skip=window.skip, limit=window.limit, KeyConditionExpression=cond)
    total = count_items(tables.posts, KeyConditionExpression=cond)
    return posts, total
