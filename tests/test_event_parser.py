from __future__ import annotations

import pytest

from stagelog.schemas import RawCandidate
from stagelog.services.event_parser import EventParser

BANNER = "COMEDY. IMPROV."


@pytest.fixture
def parser() -> EventParser:
    return EventParser(banner_phrases=(BANNER,), ticket_markers=("eventbrite", "ticket"))


# ---------------------------------------------------------------------------
# Dated events
# ---------------------------------------------------------------------------
class TestDatedEvents:
    def test_title_cleanup_strips_boilerplate(self, parser):
        draft = parser.parse(RawCandidate(text="JUN 05  7:00 PM New Show GET TICKETS NOW"))

        assert draft is not None
        assert draft.title == "New Show"
        assert draft.is_recurring is False
        assert draft.raw_date_fragment == "JUN 5"
        assert draft.raw_time_fragment == "7:00 PM"
        assert draft.description is None

    def test_multiline_card(self, parser):
        text = (
            "JUN 12 7:30 PM\n"
            "The Moth StorySLAM\n"
            "True stories told live without notes\n"
            "GET TICKETS\n"
            "SOLD OUT"
        )
        draft = parser.parse(RawCandidate(text=text))

        assert draft.title == "The Moth StorySLAM"
        assert draft.description == "True stories told live without notes"
        assert draft.sold_out is True

    def test_in_person_livestream_suffix(self, parser):
        draft = parser.parse(RawCandidate(text="JUN 20 9:30 PM Drunk Science In-person Livestream"))
        assert draft.title == "Drunk Science"

    @pytest.mark.parametrize(
        "title",
        ["Livestream Lovers Comedy", "The In-person Hour", "See More Stars Tonight", "Ticketsplitters Live"],
    )
    def test_boilerplate_words_inside_title_kept(self, parser, title):
        draft = parser.parse(RawCandidate(text=f"JUN 10 8:00 PM {title} GET TICKETS"))
        assert draft.title == title

    def test_separated_boilerplate_run_stripped(self, parser):
        draft = parser.parse(RawCandidate(text="JUN 10 8:00 PM Late Show In-person | Livestream | TICKETS"))
        assert draft.title == "Late Show"

    def test_full_month_name_and_lowercase_time(self, parser):
        draft = parser.parse(RawCandidate(text="June 3 9:00 pm Science Fair Live"))

        assert draft.raw_date_fragment == "JUNE 3"
        assert draft.raw_time_fragment == "9:00 PM"
        assert draft.title == "Science Fair Live"

    def test_not_sold_out_by_default(self, parser):
        draft = parser.parse(RawCandidate(text="JUN 10 8:00 PM Storytelling Hour GET TICKETS"))
        assert draft.sold_out is False


# ---------------------------------------------------------------------------
# Recurring shows
# ---------------------------------------------------------------------------
class TestRecurringShows:
    def test_no_date_marks_recurring(self, parser):
        text = (
            "Caveat Weekly Podcast Taping\n"
            "In-person | Livestream\n"
            "Every Tuesday night at the bar"
        )
        draft = parser.parse(RawCandidate(text=text))

        assert draft.is_recurring is True
        assert draft.title == "Caveat Weekly Podcast Taping"
        assert draft.raw_date_fragment == ""
        assert draft.raw_time_fragment is None
        assert draft.description == "Every Tuesday night at the bar"

    def test_date_without_time_is_not_a_date(self, parser):
        draft = parser.parse(RawCandidate(text="JUN 10 Storytelling Hour every month"))
        assert draft.is_recurring is True
        assert draft.title == "JUN 10 Storytelling Hour every month"


# ---------------------------------------------------------------------------
# Discard rule
# ---------------------------------------------------------------------------
class TestDiscard:
    def test_short_title_discarded(self, parser):
        assert parser.parse(RawCandidate(text="JUN 10 8:00 PM ok GET TICKETS")) is None

    def test_three_character_title_discarded(self, parser):
        assert parser.parse(RawCandidate(text="JUN 10 8:00 PM Ted")) is None

    def test_banner_discarded(self, parser):
        assert parser.parse(RawCandidate(text="COMEDY. IMPROV.")) is None

    def test_banner_match_is_case_insensitive(self, parser):
        candidate = RawCandidate(text="Comedy. Improv. Storytelling. Science. On the Lower East Side")
        assert parser.parse(candidate) is None

    def test_boilerplate_only_title_discarded(self, parser):
        assert parser.parse(RawCandidate(text="JUN 10 8:00 PM GET TICKETS")) is None

    def test_nothing_after_date_discarded(self, parser):
        assert parser.parse(RawCandidate(text="JUN 10 8:00 PM")) is None


# ---------------------------------------------------------------------------
# Ticket links
# ---------------------------------------------------------------------------
class TestTicketLinks:
    def test_first_ticketing_link_wins(self, parser):
        candidate = RawCandidate(
            text="JUN 10 8:00 PM Storytelling Hour",
            ticket_links=[
                "https://caveat.nyc/about",
                "https://www.eventbrite.com/e/storytelling-hour-123",
                "https://caveat.nyc/tickets/2",
            ],
        )
        assert parser.parse(candidate).ticket_url == "https://www.eventbrite.com/e/storytelling-hour-123"

    def test_literal_ticket_substring(self, parser):
        candidate = RawCandidate(
            text="JUN 10 8:00 PM Storytelling Hour",
            ticket_links=["https://caveat.nyc/Tickets/55"],
        )
        assert parser.parse(candidate).ticket_url == "https://caveat.nyc/Tickets/55"

    def test_no_ticketing_link(self, parser):
        candidate = RawCandidate(
            text="JUN 10 8:00 PM Storytelling Hour",
            ticket_links=["https://caveat.nyc/about"],
        )
        assert parser.parse(candidate).ticket_url is None

    def test_ticket_marker_always_present(self):
        parser = EventParser(ticket_markers=("dice.fm",))
        assert parser.find_ticket_url(["https://example.com/ticket/1"]) == "https://example.com/ticket/1"
