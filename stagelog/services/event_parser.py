"""Turn raw candidate text into draft events.

Listing cards read like "JUN 10 8:00 PM Storytelling Hour GET TICKETS":
an optional date/time stamp, the title, then promotional boilerplate and
sometimes a one-line blurb. Cards without a stamp are recurring shows.
"""

from __future__ import annotations

import logging
import re

from stagelog.errors import ParseDiscard
from stagelog.schemas import DraftEvent, RawCandidate

logger = logging.getLogger(__name__)

# "JUN 5  7:00 PM", "Sept 12 10:30pm", "June 1 7:00 PM"
DATE_TIME_RE = re.compile(
    r"\b((?:JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC)[A-Z]*\.?)\s+"
    r"(\d{1,2})(?:st|nd|rd|th)?,?\s+"
    r"(\d{1,2}:\d{2}\s*[AP]\.?M\.?)",
    re.IGNORECASE,
)

DEFAULT_BOILERPLATE: tuple[str, ...] = (
    "get tickets",
    "in-person",
    "livestream",
    "see more",
    "sold out",
    "tickets",
)
DEFAULT_TICKET_MARKERS: tuple[str, ...] = ("eventbrite", "ticket")

MIN_TITLE_LENGTH = 4


def _boilerplate_re(phrases: tuple[str, ...]) -> re.Pattern:
    """Trailing run of whole-word boilerplate phrases, optionally ending in one
    all-caps word ("GET TICKETS NOW", "In-person | Livestream").

    Phrases inside a title ("The In-person Hour") are left alone.
    """
    # Longest first so "get tickets" wins over "tickets"
    alternation = "|".join(re.escape(p) for p in sorted(phrases, key=len, reverse=True))
    phrase = rf"(?<!\w)(?:{alternation})(?!\w)"
    sep = r"[\s|•·:/\-–]*"
    return re.compile(rf"{phrase}(?:{sep}{phrase})*(?:\s+(?-i:[A-Z]+)!?)?{sep}$", re.IGNORECASE)


class EventParser:
    """Heuristic candidate → DraftEvent parser.

    banner_phrases are site taglines that show up inside item containers;
    a title equal to or containing one is not an event.
    """

    def __init__(
        self,
        banner_phrases: tuple[str, ...] | list[str] = (),
        boilerplate: tuple[str, ...] | list[str] = DEFAULT_BOILERPLATE,
        ticket_markers: tuple[str, ...] | list[str] = DEFAULT_TICKET_MARKERS,
    ):
        self.banner_phrases = tuple(p.casefold().strip() for p in banner_phrases if p.strip())
        self.ticket_markers = tuple(m.lower() for m in ticket_markers)
        if "ticket" not in self.ticket_markers:
            self.ticket_markers += ("ticket",)
        self._boilerplate = _boilerplate_re(tuple(boilerplate))

    def parse(self, candidate: RawCandidate) -> DraftEvent | None:
        """Return a DraftEvent, or None when the candidate is not an event."""
        text = candidate.text
        match = DATE_TIME_RE.search(text)
        if match:
            month, day, time = match.groups()
            region = text[match.end():]
            raw_date = f"{month.upper()} {int(day)}"
            raw_time = re.sub(r"\s+", " ", time.upper())
        else:
            region = text
            raw_date, raw_time = "", None

        lines = [line.strip() for line in region.splitlines() if line.strip()]
        try:
            title, rest = self._take_title(lines)
        except ParseDiscard as e:
            logger.debug("Discarding candidate %r: %s", text[:60], e)
            return None

        return DraftEvent(
            title=title,
            description=self._first_description(rest),
            raw_date_fragment=raw_date,
            raw_time_fragment=raw_time,
            ticket_url=self.find_ticket_url(candidate.ticket_links),
            is_recurring=match is None,
            sold_out="sold out" in text.lower(),
        )

    def clean(self, text: str) -> str:
        """Strip trailing boilerplate ("GET TICKETS NOW", "In-person | Livestream") and whitespace."""
        text = self._boilerplate.sub("", text)
        return re.sub(r"\s+", " ", text).strip(" \t-–|•·:")

    def find_ticket_url(self, links: list[str]) -> str | None:
        for link in links:
            lowered = link.lower()
            if any(marker in lowered for marker in self.ticket_markers):
                return link
        return None

    def is_banner(self, title: str) -> bool:
        folded = title.casefold()
        return any(phrase in folded for phrase in self.banner_phrases)

    def _take_title(self, lines: list[str]) -> tuple[str, list[str]]:
        """Title is the cleaned first line; later lines may hold a description."""
        if not lines:
            raise ParseDiscard("no text after date")
        title = self.clean(lines[0])
        if not title:
            raise ParseDiscard("title is only boilerplate")
        if len(title) < MIN_TITLE_LENGTH:
            raise ParseDiscard(f"title too short: {title!r}")
        if self.is_banner(title):
            raise ParseDiscard(f"banner text: {title!r}")
        return title, lines[1:]

    def _first_description(self, lines: list[str]) -> str | None:
        for line in lines:
            cleaned = self.clean(line)
            if cleaned:
                return cleaned
        return None
