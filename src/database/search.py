"""Helpers shared by the repository search queries."""


def contains_pattern(query: str) -> str:
    """Build a LIKE pattern matching ``query`` anywhere, with wildcards escaped.

    Use together with ``escape="\\\\"`` on the ``like``/``ilike`` call.
    """
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
