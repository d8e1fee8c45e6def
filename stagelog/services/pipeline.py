"""Ingestion run for one venue source: render → extract → parse → normalise → integrate.

Stages run strictly in sequence and candidates are handled one at a time,
so the report's counts and error order are deterministic.
"""

from __future__ import annotations

import logging
from typing import Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stagelog.adapters.base import VenueAdapter
from stagelog.adapters.registry import get_adapter
from stagelog.config import settings
from stagelog.errors import RenderError
from stagelog.logging_config import ContextAdapter
from stagelog.schemas import DraftEvent, IntegrationResult, NormalizedEvent
from stagelog.services.catalog import SqlCatalogStore
from stagelog.services.date_normalizer import DateNormalizer
from stagelog.services.event_classifier import EventClassifier
from stagelog.services.integrator import CatalogIntegrator
from stagelog.services.renderer import PageRenderer, PlaywrightRenderer, StaticRenderer

module_logger = logging.getLogger(__name__)

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


class IngestionPipeline:
    def __init__(
        self,
        adapter: VenueAdapter,
        renderer: PageRenderer,
        integrator: CatalogIntegrator,
        normalizer: DateNormalizer | None = None,
        classifier: EventClassifier | None = None,
        logger: LoggerLike | None = None,
    ):
        self.adapter = adapter
        self.renderer = renderer
        self.integrator = integrator
        self.normalizer = normalizer or DateNormalizer()
        self.classifier = classifier or EventClassifier()
        self.extractor = adapter.build_extractor()
        self.parser = adapter.build_parser()
        self.log = ContextAdapter(
            logger or module_logger,
            {"adapter": adapter.key, "venue": adapter.venue.slug},
        )

    async def run(self, actor_id: str) -> IntegrationResult:
        """Run one ingestion. Always returns a report, never raises."""
        self.log.info("Ingestion starting for %s", self.adapter.url, extra={"actor": actor_id})
        try:
            events = await self.collect()
        except RenderError as e:
            self.log.error("Ingestion aborted, page could not be rendered: %s", e)
            return IntegrationResult.failed(f"Integration failed: {type(e).__name__}: {e}")

        result = await self.integrator.integrate(self.adapter.venue, events, actor_id)
        self.log.info(
            "Ingestion finished",
            extra={
                "events_found": len(events),
                "venues_created": result.venues_created,
                "performances_created": result.performances_created,
                "performances_updated": result.performances_updated,
                "error_count": len(result.errors),
            },
        )
        return result

    async def preview(self) -> list[NormalizedEvent]:
        """Everything up to integration, without touching the catalog."""
        return await self.collect()

    async def collect(self) -> list[NormalizedEvent]:
        """Render the source page and turn it into normalised events.

        Raises RenderTimeout/NavigationError from the renderer.
        """
        snapshot = await self.renderer.render(
            self.adapter.url,
            wait_until_idle=self.adapter.WAIT_UNTIL_IDLE,
            timeout_ms=self.adapter.TIMEOUT_MS,
        )
        candidates = self.extractor.extract(snapshot)

        drafts: list[DraftEvent] = []
        seen: set[tuple[str, str, str | None]] = set()
        recurring = 0
        for candidate in candidates:
            draft = self.parser.parse(candidate)
            if draft is None:
                continue
            if draft.is_recurring and not self.adapter.INCLUDE_RECURRING:
                recurring += 1
                self.log.debug("Skipping recurring show: %s", draft.title)
                continue
            key = (draft.title.casefold(), draft.raw_date_fragment, draft.raw_time_fragment)
            if key in seen:
                continue
            seen.add(key)
            drafts.append(draft)

        self.log.info(
            "Parsed %d events from %d candidates (%d recurring skipped)",
            len(drafts), len(candidates), recurring,
        )
        return [self.normalize(draft) for draft in drafts]

    def normalize(self, draft: DraftEvent) -> NormalizedEvent:
        return NormalizedEvent(
            **draft.model_dump(),
            event_date=self.normalizer.normalize(draft.raw_date_fragment, draft.raw_time_fragment),
            category_tags=self.classifier.classify(draft.title, draft.description),
        )


def build_renderer(adapter: VenueAdapter, static: bool = False) -> PageRenderer:
    if static or not adapter.NEEDS_BROWSER:
        return StaticRenderer()
    return PlaywrightRenderer()


def build_pipeline(
    adapter_key: str | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    static: bool = False,
    logger: LoggerLike | None = None,
) -> IngestionPipeline:
    """Wire up a pipeline for a registered adapter from settings."""
    if session_factory is None:
        from stagelog.database import async_session as session_factory

    adapter = get_adapter(adapter_key or settings.default_adapter)
    return IngestionPipeline(
        adapter=adapter,
        renderer=build_renderer(adapter, static=static),
        integrator=CatalogIntegrator(SqlCatalogStore(session_factory)),
        logger=logger,
    )


async def run_ingestion(
    actor_id: str,
    adapter_key: str | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> IntegrationResult:
    """Single entry point: ingest the configured venue source, attributed to actor_id.

    Never raises; an unknown adapter key comes back as a failed report.
    """
    try:
        pipeline = build_pipeline(adapter_key, session_factory)
    except KeyError as e:
        message = e.args[0] if e.args else str(e)
        module_logger.error("%s", message)
        return IntegrationResult.failed(f"Integration failed: {message}")
    return await pipeline.run(actor_id)
