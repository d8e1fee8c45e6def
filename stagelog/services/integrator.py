from __future__ import annotations

import logging

from stagelog.errors import IntegrationWriteError, VenueResolutionError
from stagelog.models import Venue
from stagelog.schemas import (
    IntegrationResult,
    NormalizedEvent,
    PerformanceFields,
    ShowingFields,
    VenueDescriptor,
)
from stagelog.services.catalog import CatalogStore
from stagelog.services.date_normalizer import display_time
from stagelog.services.event_classifier import ordered_tags

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 90
DEFAULT_INTERMISSIONS = 0
DEFAULT_LANGUAGES = ["English"]
DEFAULT_COMPANY = "Various Artists"


def _validate_url(url: str | None) -> str | None:
    """Return the URL if it uses http(s), otherwise None."""
    if url and url.strip().lower().startswith(("http://", "https://")):
        return url.strip()
    if url:
        logger.warning("Rejected non-HTTP URL: %.100s", url)
    return None


class CatalogIntegrator:
    """Writes normalised events for one venue into the catalog.

    Events already known by (title, showing date, venue) are skipped, so
    re-running with the same events creates nothing new.
    """

    def __init__(self, store: CatalogStore):
        self.store = store

    async def integrate(
        self,
        venue_descriptor: VenueDescriptor,
        events: list[NormalizedEvent],
        actor_id: str,
    ) -> IntegrationResult:
        result = IntegrationResult()

        try:
            venue, created = await self._resolve_venue(venue_descriptor, actor_id)
        except VenueResolutionError as e:
            logger.error("%s", e)
            return IntegrationResult.failed(str(e))
        if created:
            result.venues_created = 1

        skipped = 0
        for event in events:
            try:
                if await self._write_event(event, venue, actor_id):
                    result.performances_created += 1
                else:
                    skipped += 1
            except IntegrationWriteError as e:
                logger.error("%s", e)
                result.errors.append(str(e))

        logger.info(
            "Venue '%s': %d performances created, %d duplicates skipped, %d errors",
            venue_descriptor.slug, result.performances_created, skipped, len(result.errors),
        )
        return result

    async def _resolve_venue(self, descriptor: VenueDescriptor, actor_id: str) -> tuple[Venue, bool]:
        try:
            venue = await self.store.find_venue_by_slug(descriptor.slug)
            if venue is not None:
                return venue, False
            logger.info("Venue '%s' not in catalog, creating it", descriptor.slug)
            return await self.store.create_venue(descriptor, actor_id), True
        except Exception as e:
            raise VenueResolutionError(descriptor.slug, str(e)) from e

    async def _write_event(self, event: NormalizedEvent, venue: Venue, actor_id: str) -> bool:
        """Create the performance unless it exists. Returns True if created."""
        try:
            existing = await self.store.find_performance(event.title, event.event_date, venue.id)
            if existing is not None:
                logger.debug("Skipping duplicate: %s (%s)", event.title, event.event_date)
                return False
            await self.store.create_performance(self.build_fields(event, venue, actor_id))
        except Exception as e:
            raise IntegrationWriteError(event.title, str(e)) from e
        logger.info("Created performance: %s (%s)", event.title, event.event_date)
        return True

    def build_fields(self, event: NormalizedEvent, venue: Venue, actor_id: str) -> PerformanceFields:
        return PerformanceFields(
            title=event.title,
            description=event.description or f"Performance at {venue.name}",
            performance_types=ordered_tags(event.category_tags),
            duration=DEFAULT_DURATION_MINUTES,
            intermissions=DEFAULT_INTERMISSIONS,
            languages=list(DEFAULT_LANGUAGES),
            company_name=DEFAULT_COMPANY,
            company_description=f"Independent performance at {venue.name}",
            venue_id=venue.id,
            submitted_by=actor_id,
            showing=ShowingFields(
                date=event.event_date,
                time=display_time(event.event_date),
                venue_id=venue.id,
                ticket_url=_validate_url(event.ticket_url),
                sold_out=event.sold_out,
            ),
        )
