"""Filter and parse line-delimited JSON test events."""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from testreport.markdown_report.models.event import Event

logger = logging.getLogger(__name__)

_EVENT_ADAPTER: TypeAdapter[Event] = TypeAdapter(Event)


def parse_line(line: str) -> Event | None:
    """Parse a single input line into an event.

    Args:
        line: Raw text line, with or without its trailing newline

    Returns:
        The classified event, or None if the line is not a recognized
        JSON event (non-JSON text, other JSON values, unknown event shapes)

    """
    text = line.strip()
    if not text:
        return None

    try:
        return _EVENT_ADAPTER.validate_json(text)
    except ValidationError as e:
        logger.debug(f"Ignoring line ({e.error_count()} errors): {text}")
        return None


def parse_events(lines: Iterable[str]) -> Iterator[Event]:
    """Lazily yield the recognized events from a sequence of lines.

    Unrecognized lines are skipped. To read the source again, call this
    again with a fresh iterable.
    """
    for line in lines:
        event = parse_line(line)
        if event is not None:
            yield event


def read_events(path: Path) -> Iterator[Event]:
    """Yield the recognized events from a file, line by line.

    Raises:
        OSError: If the file cannot be opened or read (raised on first iteration)

    """
    logger.debug(f"Reading events from: {path}")
    with path.open(encoding="utf-8", errors="replace") as f:
        yield from parse_events(f)
