from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

PAGE_SIZE = 10

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_page(raw: Optional[str]) -> int:
    """Lenient ``page`` parsing: a leading integer wins, anything else is page 1."""
    if raw is None:
        return 1
    m = _LEADING_INT.match(str(raw))
    if not m:
        return 1
    page = int(m.group(1))
    return page if page >= 1 else 1


def total_pages(total: int, page_size: int = PAGE_SIZE) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


@dataclass(frozen=True)
class PageWindow:
    page: int
    skip: int
    limit: int


def page_window(page: int, page_size: int = PAGE_SIZE) -> PageWindow:
    page = max(page, 1)
    return PageWindow(page=page, skip=(page - 1) * page_size, limit=page_size)
