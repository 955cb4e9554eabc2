from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Keeps (page - 1) * limit well inside a 32-bit signed OFFSET.
MAX_PAGE = 2**31 // MAX_LIMIT

# 18 digits already exceed every clamp, longer runs would only cost int() time.
_LEADING_INT = re.compile(r"^\s*([+-]?\d{1,18})")


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    offset: int


def _parse_int(raw: Any) -> Optional[int]:
    """Lenient integer parse: '12abc' -> 12, '2.7' -> 2, 'abc'/None -> None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    m = _LEADING_INT.match(str(raw))
    if m is None:
        return None
    return int(m.group(1))


def get_pagination(query: Mapping[str, Any]) -> Pagination:
    """Normalize page/limit from untrusted query input.

    Never raises: missing or garbage values fall back to page 1 / limit 10,
    limit is clamped into [1, 100] and page into [1, MAX_PAGE].
    """
    page = _parse_int(query.get("page"))
    page = DEFAULT_PAGE if page is None else min(max(page, 1), MAX_PAGE)

    limit = _parse_int(query.get("limit"))
    limit = DEFAULT_LIMIT if limit is None else min(max(limit, 1), MAX_LIMIT)

    return Pagination(page=page, limit=limit, offset=(page - 1) * limit)


def page_meta(p: Pagination, total: int) -> Dict[str, int]:
    total = int(total or 0)
    return {
        "page": p.page,
        "limit": p.limit,
        "total": total,
        "totalPages": math.ceil(total / p.limit),
    }
