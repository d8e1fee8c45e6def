"""Structural extraction of event-like containers from a rendered page.

Purely structural: no dates, no categories. Containers are picked by
loose class-name selectors, and short fragments are dropped as noise.
"""

from __future__ import annotations

import logging

from stagelog.schemas import RawCandidate
from stagelog.services.renderer import DomNode, DomSnapshot

logger = logging.getLogger(__name__)

DEFAULT_SELECTORS: tuple[str, ...] = (
    '[class*="item"]',
    '[class*="event"]',
    '[class*="show"]',
    '[class*="card"]',
)

MIN_TEXT_LENGTH = 20


class CandidateExtractor:
    def __init__(
        self,
        selectors: tuple[str, ...] | list[str] = DEFAULT_SELECTORS,
        min_text_length: int = MIN_TEXT_LENGTH,
    ):
        self.selectors = tuple(selectors)
        self.min_text_length = min_text_length

    def extract(self, snapshot: DomSnapshot) -> list[RawCandidate]:
        """Return one candidate per innermost container, in document order.

        Only containers with enough text count. A qualifying container that
        wraps another qualifying one (a list around its cards) is dropped in
        favour of the inner one. Identical texts are kept once.
        """
        qualifying: list[tuple[DomNode, str]] = []
        short = 0
        for node in snapshot.select(", ".join(self.selectors)):
            text = node.text.strip()
            if len(text) < self.min_text_length:
                short += 1
                continue
            qualifying.append((node, text))

        candidates: list[RawCandidate] = []
        seen: set[str] = set()
        wrappers = 0
        for node, text in qualifying:
            if any(node.contains(other) for other, _ in qualifying):
                wrappers += 1
                continue
            if text in seen:
                continue
            seen.add(text)
            candidates.append(RawCandidate(text=text, ticket_links=node.links()))

        if not candidates:
            logger.warning(
                "No event candidates on %s (selectors: %s), page layout may have changed",
                snapshot.url, ", ".join(self.selectors),
            )
        else:
            logger.info(
                "Extracted %d candidates from %s (%d short fragments, %d wrappers skipped)",
                len(candidates), snapshot.url, short, wrappers,
            )
        return candidates

    def describe(self, snapshot: DomSnapshot) -> dict[str, int]:
        """Count matches per selector, for diagnosing layout changes."""
        return {selector: len(snapshot.select(selector)) for selector in self.selectors}
