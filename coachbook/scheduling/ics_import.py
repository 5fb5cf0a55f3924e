"""Best-effort import of calendar exports (.ics) as booked slots.

The document is split on ``BEGIN:VEVENT`` and each block is read on its own by
line prefix, so a malformed event only loses that event. Start and end values
are basic-format instants (``20240215T140000Z``); they are read as UTC, with any
TZID parameter ignored, and then normalized to the display timezone.
"""
import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from icalendar import vDatetime, vText

from coachbook.scheduling.slots import Slot, SlotKind, SourceKind, civil_end_hour
from coachbook.scheduling.time_normalizer import to_civil

logger = logging.getLogger(__name__)

EVENT_BEGIN = "BEGIN:VEVENT"
EVENT_END = "END:VEVENT"
DEFAULT_CLIENT_NAME = "Imported Event"
DEFAULT_NOTES = "Imported from calendar"

# RFC 5545 folds long lines as CRLF followed by a single space or tab
_FOLD_RE = re.compile(r"\r?\n[ \t]")
_SUMMARY_RE = re.compile(r"^SUMMARY(?:;[^:\r\n]*)?:(.*)$", re.MULTILINE)
_DESCRIPTION_RE = re.compile(r"^DESCRIPTION(?:;[^:\r\n]*)?:(.*)$", re.MULTILINE)
_DTSTART_RE = re.compile(r"^DTSTART[^:\r\n]*:(\d{8}T\d{6}Z?)", re.MULTILINE)
_DTEND_RE = re.compile(r"^DTEND[^:\r\n]*:(\d{8}T\d{6}Z?)", re.MULTILINE)
_ESCAPED_NEWLINE_RE = re.compile(r"\\[nN]|\r?\n")


@dataclass(frozen=True)
class IcsImportResult:
    slots: tuple[Slot, ...]
    event_blocks: int

    @property
    def skipped(self) -> int:
        """Events present in the file that did not become slots."""
        return self.event_blocks - len(self.slots)

    def __iter__(self):
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)


def _decode_instant(value: str) -> datetime:
    instant = vDatetime.from_ical(value)
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant


def _decode_text(match: re.Match | None, fallback: str) -> str:
    if not match:
        return fallback
    text = _ESCAPED_NEWLINE_RE.sub(" ", str(vText.from_ical(match.group(1).rstrip("\r"))))
    return text.strip() or fallback


def _parse_event(block: str) -> Slot | None:
    start_match = _DTSTART_RE.search(block)
    end_match = _DTEND_RE.search(block)
    if not start_match or not end_match:
        return None

    day, start_time = to_civil(_decode_instant(start_match.group(1)))
    end_time = civil_end_hour(day, _decode_instant(end_match.group(1)))
    return Slot(
        id=f"ics-{uuid4().hex}",
        source_kind=SourceKind.APPOINTMENT,
        date=day,
        start_time=start_time,
        end_time=end_time,
        kind=SlotKind.BOOKED,
        client_name=_decode_text(_SUMMARY_RE.search(block), DEFAULT_CLIENT_NAME),
        notes=_decode_text(_DESCRIPTION_RE.search(block), DEFAULT_NOTES),
    )


def parse(ics_text: str) -> IcsImportResult:
    """Every well-formed VEVENT as a booked slot. Never raises for bad events."""
    blocks = _FOLD_RE.sub("", ics_text).split(EVENT_BEGIN)[1:]
    slots: list[Slot] = []
    for index, block in enumerate(blocks):
        block = block.split(EVENT_END, 1)[0]
        try:
            slot = _parse_event(block)
        except Exception as e:
            logger.debug("Dropping calendar event %d: %s: %s", index, type(e).__name__, e)
            continue
        if slot is None:
            logger.debug("Dropping calendar event %d: missing DTSTART or DTEND", index)
            continue
        slots.append(slot)

    if len(slots) < len(blocks):
        logger.info("Imported %d of %d calendar events", len(slots), len(blocks))
    return IcsImportResult(slots=tuple(slots), event_blocks=len(blocks))
