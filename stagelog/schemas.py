from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# --- Extraction ---
class RawCandidate(BaseModel):
    """A structurally extracted DOM fragment that may or may not describe an event."""
    text: str
    ticket_links: list[str] = []


class DraftEvent(BaseModel):
    """Parsed candidate, not yet date-normalised or classified.

    raw_date_fragment is empty for recurring entries (no date pattern found).
    """
    title: str = Field(min_length=4)
    description: str | None = None
    raw_date_fragment: str = ""
    raw_time_fragment: str | None = None
    ticket_url: str | None = None
    is_recurring: bool = False
    sold_out: bool = False


class NormalizedEvent(DraftEvent):
    """Draft event with a resolved date and category tags, ready for storage."""
    event_date: datetime
    category_tags: set[str] = Field(min_length=1)


# --- Catalog ---
class VenueDescriptor(BaseModel):
    slug: str
    name: str
    description: str | None = None
    address: str
    city: str
    state: str
    zip_code: str | None = None
    latitude: float
    longitude: float
    capacity: int | None = None
    venue_type: str = "theater"
    website: str | None = None


class ShowingFields(BaseModel):
    date: datetime
    time: str
    venue_id: int
    ticket_url: str | None = None
    sold_out: bool = False


class PerformanceFields(BaseModel):
    title: str
    description: str
    performance_types: list[str]
    duration: int
    intermissions: int = 0
    languages: list[str] = ["English"]
    company_name: str
    company_description: str | None = None
    venue_id: int
    submitted_by: str
    showing: ShowingFields


# --- Reports ---
class IntegrationResult(BaseModel):
    venues_created: int = 0
    performances_created: int = 0
    performances_updated: int = 0
    errors: list[str] = []

    @classmethod
    def failed(cls, message: str) -> IntegrationResult:
        """All-zero report carrying a single top-level failure."""
        return cls(errors=[message])

    def to_report(self) -> dict:
        return {
            "venuesCreated": self.venues_created,
            "performancesCreated": self.performances_created,
            "performancesUpdated": self.performances_updated,
            "errors": list(self.errors),
        }
