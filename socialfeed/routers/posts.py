from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from socialfeed.core.pagination import page_window, parse_page, total_pages
from socialfeed.dependencies import CurrentUser, Store
from socialfeed.errors import GENERIC_SERVER_MESSAGE
from socialfeed.metrics import record_page
from socialfeed.models import PostsEnvelope, PostsPage
from socialfeed.services.posts import list_user_posts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("", response_model=PostsEnvelope, response_model_exclude_none=True)
def get_posts(
    tables: Store,
    ctx: CurrentUser,
    page: Optional[str] = Query(default=None),
) -> PostsEnvelope:
    """Caller's posts, ten per page."""
    window = page_window(parse_page(page))
    try:
        posts, total = list_user_posts(tables, ctx.user_id, window)
    except Exception as exc:
        logger.exception("Error while getting user posts", extra={"user_id": ctx.user_id, "page": window.page})
        raise HTTPException(500, GENERIC_SERVER_MESSAGE) from exc

    pages = total_pages(total)
    record_page("posts", window.page, len(posts), pages)
    return PostsEnvelope(
        message="User Posts Received",
        code=200,
        data=PostsPage(
            posts=posts,
            current_page=window.page,
            total_pages=pages,
            total_posts=total,
        ),
    )
