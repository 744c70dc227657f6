"""Shared validation functions for note and history schemas."""
import re

from core.config import get_settings

# Tag format: lowercase alphanumeric segments joined by hyphens (e.g. 'road-trip')
TAG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

# Alias format: letters, digits, '.', '_' and '-', must start alphanumeric
ALIAS_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
MAX_ALIAS_LENGTH = 255


def validate_and_normalize_tag(tag: str) -> str:
    """
    Lowercase and trim a tag, then check its format.

    Raises:
        ValueError: If the tag is empty or not hyphen-separated lowercase alphanumerics.
    """
    normalized = tag.strip().lower()
    if not normalized:
        raise ValueError("Tag name cannot be empty")
    if TAG_PATTERN.match(normalized) is None:
        raise ValueError(
            f"Invalid tag '{normalized}': use lowercase letters, numbers and hyphens "
            "(e.g. 'road-trip').",
        )
    return normalized


def validate_and_normalize_tags(tags: list[str]) -> list[str]:
    """
    Normalize a tag list.

    Blank entries are dropped and duplicates collapse to their first occurrence,
    so ['Work', 'work', ' '] becomes ['work'].
    """
    result: list[str] = []
    for tag in tags:
        if not tag.strip():
            continue
        normalized = validate_and_normalize_tag(tag)
        if normalized not in result:
            result.append(normalized)
    return result


def validate_alias(alias: str | None) -> str | None:
    """Trim an alias and check its format. None passes through."""
    if alias is None:
        return None
    alias = alias.strip()
    if len(alias) > MAX_ALIAS_LENGTH or ALIAS_PATTERN.match(alias) is None:
        raise ValueError(
            f"Invalid alias '{alias}': use letters, numbers, '.', '_' and '-', "
            "starting with a letter or number.",
        )
    return alias


def _check_length(value: str | None, limit: int, label: str) -> str | None:
    if value is not None and len(value) > limit:
        raise ValueError(f"{label} is {len(value):,} characters; the limit is {limit:,}.")
    return value


def validate_content_length(content: str) -> str:
    """Reject content longer than MAX_CONTENT_LENGTH."""
    return _check_length(content, get_settings().max_content_length, "Content")


def validate_title_length(title: str | None) -> str | None:
    """Reject titles longer than MAX_TITLE_LENGTH."""
    return _check_length(title, get_settings().max_title_length, "Title")
