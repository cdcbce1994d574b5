from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from socialfeed.errors import InternalError
from socialfeed.metrics import record_store_error

logger = logging.getLogger(__name__)

# Items read per round trip while walking past the skipped prefix of a page.
SCAN_BATCH = 100

BATCH_GET_MAX = 100
BATCH_GET_ATTEMPTS = 5


def plain(value: Any) -> Any:
    """DynamoDB numbers come back as Decimal; make items JSON friendly."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(v) for v in value]
    if isinstance(value, set):
        return sorted(plain(v) for v in value)
    return value


def _client_error_message(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Message", "unknown")


def ddb_query(table: Any, **kwargs) -> Dict[str, Any]:
    try:
        return table.query(**kwargs)
    except ClientError as exc:
        record_store_error("query")
        logger.exception("DynamoDB query failed: %s", _client_error_message(exc))
        raise InternalError("DynamoDB query failed") from exc


def ddb_get_item(table: Any, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    try:
        return table.get_item(Key=key).get("Item")
    except ClientError as exc:
        record_store_error("get_item")
        logger.exception("DynamoDB get_item failed: %s", _client_error_message(exc))
        raise InternalError("DynamoDB get_item failed") from exc


def ddb_update_item(table: Any, **kwargs) -> Dict[str, Any]:
    try:
        return table.update_item(**kwargs).get("Attributes", {})
    except ClientError as exc:
        record_store_error("update_item")
        logger.exception("DynamoDB update_item failed: %s", _client_error_message(exc))
        raise InternalError("DynamoDB update_item failed") from exc


def query_page(table: Any, *, skip: int, limit: int, **query_kwargs) -> List[Dict[str, Any]]:
    """Offset pagination on top of a key-condition query.

    DynamoDB has no native skip, so the first ``skip`` matches are read and
    discarded, following ``LastEvaluatedKey`` until ``limit`` items are kept.
    """
    kept: List[Dict[str, Any]] = []
    to_skip = skip
    last_key = None
    while len(kept) < limit:
        kwargs: Dict[str, Any] = dict(query_kwargs)
        kwargs["Limit"] = min(SCAN_BATCH, to_skip + limit - len(kept)) if to_skip else limit - len(kept)
        if last_key:
            kwargs["ExclusiveStartKey"] = last_key
        resp = ddb_query(table, **kwargs)
        items = resp.get("Items", [])
        if to_skip:
            dropped = min(to_skip, len(items))
            items = items[dropped:]
            to_skip -= dropped
        kept.extend(items[: limit - len(kept)])
        last_key = resp.get("LastEvaluatedKey")
        if not last_key:
            break
    return [plain(it) for it in kept]


def count_items(table: Any, **query_kwargs) -> int:
    total = 0
    last_key = None
    while True:
        kwargs: Dict[str, Any] = dict(query_kwargs)
        kwargs["Select"] = "COUNT"
        if last_key:
            kwargs["ExclusiveStartKey"] = last_key
        resp = ddb_query(table, **kwargs)
        total += int(resp.get("Count", 0))
        last_key = resp.get("LastEvaluatedKey")
        if not last_key:
            break
    return total


def batch_get(table: Any, keys: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """BatchGetItem through the table's client, retrying ``UnprocessedKeys``. Keys are deduplicated."""
    unique: List[Dict[str, Any]] = []
    seen = set()
    for key in keys:
        marker = tuple(sorted(key.items()))
        if marker not in seen:
            seen.add(marker)
            unique.append(key)

    client = table.meta.client
    out: List[Dict[str, Any]] = []
    for start in range(0, len(unique), BATCH_GET_MAX):
        pending: Dict[str, Any] = {table.name: {"Keys": unique[start:start + BATCH_GET_MAX]}}
        for _ in range(BATCH_GET_ATTEMPTS):
            try:
                resp = client.batch_get_item(RequestItems=pending)
            except ClientError as exc:
                record_store_error("batch_get_item")
                logger.exception("DynamoDB batch_get_item failed: %s", _client_error_message(exc))
                raise InternalError("DynamoDB batch_get_item failed") from exc
            out.extend(plain(it) for it in resp.get("Responses", {}).get(table.name, []))
            pending = resp.get("UnprocessedKeys") or {}
            if not pending:
                break
        else:
            logger.error("DynamoDB batch_get_item left keys unprocessed")
            raise InternalError("DynamoDB batch_get_item left keys unprocessed")
    return out
