from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from socialfeed.dependencies import CurrentUser, Store
from socialfeed.errors import GENERIC_SERVER_MESSAGE
from socialfeed.metrics import record_account_update
from socialfeed.models import NameData, NameEnvelope, UpdateNameReq, UpdateUsernameReq, UsernameData, UsernameEnvelope
from socialfeed.services.users import update_name, update_username

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


@router.patch("/update-username", response_model=UsernameEnvelope, response_model_exclude_none=True)
def patch_username(body: UpdateUsernameReq, tables: Store, ctx: CurrentUser) -> UsernameEnvelope:
    try:
        username = update_username(tables, ctx.user_id, body.username)
    except HTTPException as exc:
        record_account_update("username", str(exc.status_code))
        raise
    except Exception as exc:
        record_account_update("username", "500")
        logger.exception("Error while updating username", extra={"user_id": ctx.user_id})
        raise HTTPException(500, GENERIC_SERVER_MESSAGE) from exc

    record_account_update("username", "200")
    logger.info("username updated", extra={"user_id": ctx.user_id})
    return UsernameEnvelope(message="Username updated successfully", code=200, data=UsernameData(username=username))


@router.patch("/update-name", response_model=NameEnvelope)
def patch_name(body: UpdateNameReq, tables: Store, ctx: CurrentUser) -> NameEnvelope:
    updates = body.model_dump(exclude_none=True)
    try:
        name = update_name(tables, ctx.user_id, updates)
    except HTTPException as exc:
        record_account_update("name", str(exc.status_code))
        raise
    except Exception as exc:
        record_account_update("name", "500")
        logger.exception("Error while updating name", extra={"user_id": ctx.user_id})
        raise HTTPException(500, GENERIC_SERVER_MESSAGE) from exc

    record_account_update("name", "200")
    logger.info("name updated", extra={"user_id": ctx.user_id})
    return NameEnvelope(message="Name updated successfully", code=200, data=NameData(**name))
