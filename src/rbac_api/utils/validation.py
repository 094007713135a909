"""Input validation helpers shared by DTOs and repositories."""

# Names of permissions and roles
NAME_MAX_LENGTH = 100
NAME_PATTERN = r"^[A-Za-z0-9_-]+$"
DESCRIPTION_MAX_LENGTH = 500

# Listing
MAX_SEARCH_LENGTH = 200
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100


def sanitize_search(search: str | None, max_length: int = MAX_SEARCH_LENGTH) -> str | None:
    """Sanitize search input.

    Args:
        search: Raw search string
        max_length: Maximum allowed length

    Returns:
        Sanitized search string or None when nothing is left
    """
    if search is None:
        return None

    search = search[:max_length]
    # Parameters are bound by SQLAlchemy; this only removes statement separators
    search = search.replace(";", "")
    return search.strip() or None


def escape_like_wildcards(value: str) -> str:
    """Escape SQL LIKE wildcards so they match literally.

    Args:
        value: Raw string value to escape

    Returns:
        Escaped string for use with ``ilike(..., escape="\\\\")``

    Example:
        >>> escape_like_wildcards("read_users")
        'read\\\\_users'
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
