from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .spec import Entry

SEPARATOR = "/"
SINGLE_LEVEL = "+"
MULTI_LEVEL = "#"


def validate_pattern(pattern: str) -> None:
    """Reject subscription filters the broker would refuse."""
    if not pattern:
        raise ValueError("topic pattern must not be empty")
    segments = pattern.split(SEPARATOR)
    for i, seg in enumerate(segments):
        if seg in (SINGLE_LEVEL, MULTI_LEVEL):
            if seg == MULTI_LEVEL and i != len(segments) - 1:
                raise ValueError(
                    f"'#' must be the last segment of topic pattern {pattern!r}"
                )
            continue
        if SINGLE_LEVEL in seg or MULTI_LEVEL in seg:
            raise ValueError(
                f"wildcards must occupy a whole segment in topic pattern {pattern!r}"
            )


def matches(topic: str, pattern: str) -> bool:
    """
    MQTT filter matching.

    '+' matches exactly one segment, a trailing '#' matches zero or more
    trailing segments, everything else compares literally. Topics starting
    with '$' are not matched by a leading wildcard.
    """
    if topic.startswith("$") and pattern[:1] in (SINGLE_LEVEL, MULTI_LEVEL):
        return False

    topic_segments = topic.split(SEPARATOR)
    pattern_segments = pattern.split(SEPARATOR)

    for i, seg in enumerate(pattern_segments):
        if seg == MULTI_LEVEL:
            return True
        if i >= len(topic_segments):
            return False
        if seg == SINGLE_LEVEL:
            continue
        if seg != topic_segments[i]:
            return False

    return len(topic_segments) == len(pattern_segments)


def find_entry(topic: str, entries: Iterable["Entry"]) -> Optional["Entry"]:
    """First entry (in configured order) whose src_topic matches, else None."""
    for entry in entries:
        if matches(topic, entry.src_topic):
            return entry
    return None
