from __future__ import annotations

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, Info, generate_latest

# HTTP
REQUESTS = Counter(
    "socialfeed_http_requests_total",
    "HTTP requests by route template and envelope code",
    ["method", "route", "code"],
)
REQUEST_LATENCY = Histogram(
    "socialfeed_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5),
)

# Listing
PAGES_SERVED = Counter(
    "socialfeed_pages_served_total",
    "Pages returned by the list endpoints",
    ["resource"],
)
PAGE_ITEMS = Histogram(
    "socialfeed_page_items",
    "Records on a returned page",
    ["resource"],
    buckets=(0, 1, 2, 5, 8, 10),
)
EMPTY_PAGES = Counter(
    "socialfeed_empty_pages_total",
    "Pages requested past the last page of a resource",
    ["resource"],
)

# Account
ACCOUNT_UPDATES = Counter(
    "socialfeed_account_updates_total",
    "Username/name update attempts by outcome",
    ["field", "outcome"],
)

# Store
STORE_ERRORS = Counter(
    "socialfeed_store_errors_total",
    "DynamoDB client errors by operation",
    ["operation"],
)

APP_INFO = Info(
    "socialfeed_app",
    "Application metadata",
)


def record_page(resource: str, page: int, items: int, total_pages: int) -> None:
    PAGES_SERVED.labels(resource=resource).inc()
    PAGE_ITEMS.labels(resource=resource).observe(items)
    if items == 0 and page > total_pages:
        EMPTY_PAGES.labels(resource=resource).inc()


def record_account_update(field: str, outcome: str) -> None:
    ACCOUNT_UPDATES.labels(field=field, outcome=outcome).inc()


def record_store_error(operation: str) -> None:
    STORE_ERRORS.labels(operation=operation).inc()


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


async def metrics_middleware(request: Request, call_next: Callable[[Request], Response]) -> Response:
    start = time.perf_counter()
    code = 500
    try:
        response = await call_next(request)
        code = response.status_code
        return response
    finally:
        route = _route_template(request)
        REQUEST_LATENCY.labels(method=request.method, route=route).observe(time.perf_counter() - start)
        REQUESTS.labels(method=request.method, route=route, code=str(code)).inc()


def set_app_info(name: str, version: str) -> None:
    APP_INFO.info({"name": name, "version": version})


def metrics_endpoint() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
