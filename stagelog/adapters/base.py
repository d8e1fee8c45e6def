from __future__ import annotations

from abc import ABC, abstractmethod

from stagelog.schemas import VenueDescriptor
from stagelog.services.candidates import DEFAULT_SELECTORS, MIN_TEXT_LENGTH, CandidateExtractor
from stagelog.services.event_parser import DEFAULT_BOILERPLATE, DEFAULT_TICKET_MARKERS, EventParser


class VenueAdapter(ABC):
    """Fixed configuration for one venue's listings page.

    The pipeline core is venue-agnostic; everything tuned to a site's layout
    lives on an adapter. Subclasses override the class attributes and
    register themselves with @register_adapter.
    """

    key: str = ""
    url: str = ""

    # Structural extraction
    CONTAINER_SELECTORS: tuple[str, ...] = DEFAULT_SELECTORS
    MIN_TEXT_LENGTH: int = MIN_TEXT_LENGTH

    # Text heuristics
    BANNER_PHRASES: tuple[str, ...] = ()
    BOILERPLATE: tuple[str, ...] = DEFAULT_BOILERPLATE
    TICKET_MARKERS: tuple[str, ...] = DEFAULT_TICKET_MARKERS

    # Rendering
    WAIT_UNTIL_IDLE: bool = True
    TIMEOUT_MS: int | None = None  # None → settings.render_timeout_ms
    NEEDS_BROWSER: bool = True

    # Undated entries get a fallback date that changes every run, which
    # would defeat the duplicate check, so they are skipped unless opted in.
    INCLUDE_RECURRING: bool = False

    @property
    @abstractmethod
    def venue(self) -> VenueDescriptor:
        """Catalog record for this source's venue."""
        ...

    def build_extractor(self) -> CandidateExtractor:
        return CandidateExtractor(self.CONTAINER_SELECTORS, self.MIN_TEXT_LENGTH)

    def build_parser(self) -> EventParser:
        return EventParser(
            banner_phrases=self.BANNER_PHRASES,
            boilerplate=self.BOILERPLATE,
            ticket_markers=self.TICKET_MARKERS,
        )
