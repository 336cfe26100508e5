"""Offset pagination helpers shared by list endpoints."""

import math

from sismonev.core.config import get_settings

settings = get_settings()


def clamp_limit(limit: int | None) -> int:
    if not limit or limit < 1:
        return settings.DEFAULT_PAGE_SIZE
    return min(limit, settings.MAX_PAGE_SIZE)


def page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
