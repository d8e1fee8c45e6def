from __future__ import annotations

from stagelog.adapters.base import VenueAdapter
from stagelog.adapters.registry import register_adapter
from stagelog.schemas import VenueDescriptor

CAVEAT_URL = "https://caveat.nyc/"

CAVEAT_VENUE = VenueDescriptor(
    slug="caveat-nyc",
    name="Caveat",
    description="A library bar for curious people in the Lower East Side",
    address="21A Clinton St, New York, NY 10002",
    city="NYC",
    state="NY",
    zip_code="10002",
    latitude=40.7209,
    longitude=-73.9837,
    capacity=75,
    venue_type="multi-purpose",
    website="https://caveat.nyc",
)


@register_adapter("caveat")
class CaveatAdapter(VenueAdapter):
    """Caveat NYC, a Squarespace site whose listings load client-side.

    Listing cards are "item" blocks: "JUN 5 7:00 PM <title> GET TICKETS",
    with Eventbrite ticket links. The site tagline also sits in an item
    block and must not become an event.
    """

    url = CAVEAT_URL

    CONTAINER_SELECTORS = ('[class*="item"]',)
    BANNER_PHRASES = ("COMEDY. IMPROV.",)
    TICKET_MARKERS = ("eventbrite", "ticket", "dice.fm", "tixr")

    @property
    def venue(self) -> VenueDescriptor:
        return CAVEAT_VENUE
