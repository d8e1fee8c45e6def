"""Event classification service - keyword rules over title and description."""

from typing import Iterable, Optional

# Ordered rule table: (keywords, tag). Every matching rule contributes its tag.
CATEGORY_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("comedy", "joke", "funny"), "comedy"),
    (("story", "tale", "narrative"), "spoken-word"),
    (("show", "performance", "variety"), "experimental"),
)

DEFAULT_TAG = "other"

_TAG_ORDER = [tag for _, tag in CATEGORY_RULES] + [DEFAULT_TAG]


class EventClassifier:
    """Assigns performance-type tags to an event.

    Classification Strategy:
    1. Lower-case "title description" once
    2. Fire every rule with at least one keyword as a substring
    3. No rule fired → {"other"}

    The result is never empty.
    """

    @staticmethod
    def classify(title: str, description: Optional[str] = None) -> set[str]:
        combined = f"{title} {description or ''}".lower()
        tags = {
            tag for keywords, tag in CATEGORY_RULES
            if any(keyword in combined for keyword in keywords)
        }
        return tags or {DEFAULT_TAG}


def ordered_tags(tags: Iterable[str]) -> list[str]:
    """Tags in rule-table order; unknown tags sort last alphabetically."""
    known = {tag: i for i, tag in enumerate(_TAG_ORDER)}
    return sorted(set(tags), key=lambda t: (known.get(t, len(known)), t))
