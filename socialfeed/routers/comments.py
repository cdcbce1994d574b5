from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from socialfeed.core.pagination import page_window, parse_page, total_pages
from socialfeed.dependencies import CurrentUser, Store
from socialfeed.errors import GENERIC_SERVER_MESSAGE
from socialfeed.metrics import record_page
from socialfeed.models import CommentsEnvelope, CommentsPage
from socialfeed.services.comments import list_post_comments

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get("", response_model=CommentsEnvelope, response_model_exclude_none=True)
def get_post_comments(
    tables: Store,
    ctx: CurrentUser,
    post_id: Optional[str] = Query(default=None, alias="postId"),
    page: Optional[str] = Query(default=None),
) -> CommentsEnvelope:
    if not post_id or not post_id.strip():
        raise HTTPException(400, "postId is required")
    post_id = post_id.strip()

    window = page_window(parse_page(page))
    try:
        comments, total = list_post_comments(tables, post_id, window)
    except Exception as exc:
        logger.exception(
            "Error while getting post comments",
            extra={"user_id": ctx.user_id, "post_id": post_id, "page": window.page},
        )
        raise HTTPException(500, GENERIC_SERVER_MESSAGE) from exc

    pages = total_pages(total)
    record_page("comments", window.page, len(comments), pages)
    return CommentsEnvelope(
        message="Comments fetched successfully",
        code=200,
        data=CommentsPage(
            comments=comments,
            current_page=window.page,
            total_pages=pages,
            total_comments=total,
        ),
    )
