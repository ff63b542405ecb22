import re
from datetime import date, datetime

from utils.layout_engine import MODE_STREAM

_WORD_SPLIT = re.compile(r"[\W_]+")


def pascal_case(name: str) -> str:
    """
    Collapse a deck name into PascalCase for filenames.

    Words are split on anything that is not a letter or digit; each word keeps
    its own casing after the first letter ("UW Control" -> "UWControl").
    """
    words = [word for word in _WORD_SPLIT.split(name) if word]
    return "".join(word[:1].upper() + word[1:] for word in words)


def format_stream_date(stream_date: date) -> str:
    """Date line shown on stream thumbnails, e.g. 'Monday, October 19'."""
    return f"{stream_date:%A}, {stream_date:%B} {stream_date.day}"


def describe_last_used(last_used: datetime | None, now: datetime | None = None) -> str:
    """Short label for the art picker ('Never used', 'Used today', 'Used 3 days ago')."""
    if last_used is None:
        return "Never used"
    current = now or datetime.now(last_used.tzinfo)
    days = (current.date() - last_used.date()).days
    if days <= 0:
        return "Used today"
    if days == 1:
        return "Used yesterday"
    return f"Used {days} days ago"


def export_filename(
    mode: str,
    left_deck_name: str = "",
    right_deck_name: str = "",
    stream_date: date | None = None,
) -> str:
    """Filename for an exported thumbnail."""
    if mode == MODE_STREAM:
        stamp = stream_date or date.today()
        return f"Livestream-{stamp:%m-%d-%y}.png"
    left = pascal_case(left_deck_name) or "Deck1"
    right = pascal_case(right_deck_name) or "Deck2"
    return f"{left}Vs{right}.png"


__all__ = ["describe_last_used", "export_filename", "format_stream_date", "pascal_case"]
