# jumboboxd/db/crud/pagination.py
from __future__ import annotations

import math
from typing import Any, Dict

from jumboboxd.core.errors import ValidationError

MAX_LIMIT = 100


def check_page_args(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("page must be >= 1")
    if limit < 1 or limit > MAX_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")


def offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def pagination(page: int, limit: int, total: int) -> Dict[str, Any]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }
