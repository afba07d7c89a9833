"""Classify files into content categories by path."""

from pathlib import PurePath

from mergesight.state.conflict import ContentCategory

EXTENSION_CATEGORIES: dict[str, ContentCategory] = {
    **dict.fromkeys(
        ("rs", "py", "js", "ts", "java", "cpp", "c", "h"),
        ContentCategory.SOURCE_CODE,
    ),
    **dict.fromkeys(("md", "txt", "rst"), ContentCategory.DOCUMENTATION),
    **dict.fromkeys(
        ("json", "yaml", "yml", "toml", "ini", "conf"),
        ContentCategory.CONFIGURATION,
    ),
    **dict.fromkeys(
        ("png", "jpg", "jpeg", "gif", "svg"), ContentCategory.IMAGE
    ),
}

SOURCE_EXTENSIONS = frozenset(
    ext for ext, category in EXTENSION_CATEGORIES.items()
    if category is ContentCategory.SOURCE_CODE
)


def extension(path: str) -> str:
    """Return the extension of path without the dot ("" if none)."""
    return PurePath(path).suffix[1:]


def classify(path: str) -> ContentCategory:
    """Classify a file by its path.

    Known extensions map straight to a category. Anything else is
    binary when the path ends in ".bin" or mentions "binary", and
    text otherwise. Never fails.

    Args:
        path: File path, relative or absolute

    Returns:
        ContentCategory for the path
    """
    category = EXTENSION_CATEGORIES.get(extension(path))
    if category is not None:
        return category
    if path.endswith(".bin") or "binary" in path:
        return ContentCategory.BINARY
    return ContentCategory.TEXT
