"""Exception taxonomy for the ingestion pipeline.

Only venue resolution and rendering failures end a run early, and the
pipeline turns those into a report rather than letting them escape.
"""


class IngestError(Exception):
    """Base class for pipeline failures."""


# -- Renderer (fatal to the run) ---------------------------------------------

class RenderError(IngestError):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")


class RenderTimeout(RenderError):
    """Network never went idle within the timeout."""


class NavigationError(RenderError):
    """Transport, DNS or HTTP failure while loading the page."""


# -- Per-candidate (expected, never leave their module) ----------------------

class ParseDiscard(IngestError):
    """Candidate does not describe a usable event."""


class DateParseFallback(IngestError):
    """Date fragments could not be turned into a calendar date."""


# -- Catalog ------------------------------------------------------------------

class CatalogStoreError(IngestError):
    """Persistence failure raised by a catalog store."""


class IntegrationWriteError(IngestError):
    def __init__(self, title: str, reason: str):
        self.title = title
        self.reason = reason
        super().__init__(f'Failed to create performance for "{title}": {reason}')


class VenueResolutionError(IngestError):
    def __init__(self, slug: str, reason: str):
        self.slug = slug
        self.reason = reason
        super().__init__(f"Integration failed: could not resolve venue '{slug}': {reason}")
