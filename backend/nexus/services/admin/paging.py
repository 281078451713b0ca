from ...errors import ValidationError


def page_offset(page: int, limit: int) -> int:
    """Row offset of a 1-based page."""
    if page < 1:
        raise ValidationError("page must be at least 1", details={"page": page})
    if limit < 1:
        raise ValidationError("limit must be at least 1", details={"limit": limit})
    return (page - 1) * limit
