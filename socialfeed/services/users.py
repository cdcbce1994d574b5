from __future__ import annotations

import time
from typing import Any, Dict, Iterable, Optional

from boto3.dynamodb.conditions import Key
from fastapi import HTTPException

from socialfeed.core.tables import Tables
from socialfeed.services.store import batch_get, ddb_get_item, ddb_query, ddb_update_item, plain


def get_user(tables: Tables, user_id: str) -> Optional[Dict[str, Any]]:
    item = ddb_get_item(tables.users, {"user_id": user_id})
    return plain(item) if item else None


def usernames_for(tables: Tables, user_ids: Iterable[str]) -> Dict[str, Optional[str]]:
    users = batch_get(tables.users, [{"user_id": uid} for uid in user_ids if uid])
    return {u["user_id"]: u.get("username") for u in users if u.get("user_id")}


def username_owner(tables: Tables, username: str) -> Optional[str]:
    resp = ddb_query(
        tables.users,
        IndexName=tables.users_username_index,
        KeyConditionExpression=Key("username").eq(username),
        Limit=1,
    )
    items = resp.get("Items", [])
    return items[0].get("user_id") if items else None


def update_username(tables: Tables, user_id: str, username: str) -> str:
    if not get_user(tables, user_id):
        raise HTTPException(404, "User not found")
    owner = username_owner(tables, username)
    if owner and owner != user_id:
        raise HTTPException(409, "Username is already taken")
    ddb_update_item(
        tables.users,
        Key={"user_id": user_id},
        UpdateExpression="SET username = :u, updated_at = :t",
        ExpressionAttributeValues={":u": username, ":t": int(time.time())},
        ReturnValues="ALL_NEW",
    )
    return username


def update_name(tables: Tables, user_id: str, updates: Dict[str, str]) -> Dict[str, Optional[str]]:
    if not updates:
        raise HTTPException(400, "No name fields provided")
    if not get_user(tables, user_id):
        raise HTTPException(404, "User not found")
    sets = ["updated_at = :t"]
    values: Dict[str, Any] = {":t": int(time.time())}
    for field in ("first_name", "last_name"):
        if field in updates:
            sets.append(f"{field} = :{field}")
            values[f":{field}"] = updates[field]
    attrs = ddb_update_item(
        tables.users,
        Key={"user_id": user_id},
        UpdateExpression="SET " + ", ".join(sets),
        ExpressionAttributeValues=values,
        ReturnValues="ALL_NEW",
    )
    return {"first_name": attrs.get("first_name"), "last_name": attrs.get("last_name")}
