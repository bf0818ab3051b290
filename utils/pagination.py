import math


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def build_pagination(page: int, limit: int, total: int) -> dict:
    return {"page": page, "limit": limit, "total": total, "pages": page_count(total, limit)}


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit
