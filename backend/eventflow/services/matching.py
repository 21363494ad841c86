"""
Subscriber matching for newly approved events.

A subscription matches when every filter it sets matches:
  - category: equal to the event category, ignoring case
  - location: contained in the event location, ignoring case
  - keywords: comma-separated terms, ANY of which appears in the event's
    title, description, category or location (OR, not AND)

Empty filters always match, and so do the sentinel "all" for category and
location, so a subscription with no filters receives every approved event.
Keyword terms are not filtered: an empty term such as the tail of "jazz,"
is contained in every event.
"""

from typing import Iterable, Optional

from eventflow.models.event import Event
from eventflow.models.subscription import NewsletterSubscription

ANY_FILTER = "all"


def _is_unset(value: Optional[str]) -> bool:
    return value is None or value.strip() == "" or value.strip().lower() == ANY_FILTER


def parse_keywords(keyword_filter: Optional[str]) -> list[str]:
    if keyword_filter is None or not keyword_filter.strip():
        return []
    # Empty terms are kept: "jazz," matches every event
    return [term.strip().lower() for term in keyword_filter.split(",")]


def _haystack(event: Event) -> str:
    parts = (event.title, event.description, event.category, event.location)
    return " ".join(part or "" for part in parts).lower()


def category_matches(event: Event, category_filter: Optional[str]) -> bool:
    if _is_unset(category_filter):
        return True
    return (event.category or "").strip().lower() == category_filter.strip().lower()


def location_matches(event: Event, location_filter: Optional[str]) -> bool:
    if _is_unset(location_filter):
        return True
    return location_filter.strip().lower() in (event.location or "").lower()


def keywords_match(event: Event, keyword_filter: Optional[str]) -> bool:
    terms = parse_keywords(keyword_filter)
    if not terms:
        return True
    haystack = _haystack(event)
    return any(term in haystack for term in terms)


def subscription_matches(event: Event, subscription: NewsletterSubscription) -> bool:
    return (
        category_matches(event, subscription.category_filter)
        and location_matches(event, subscription.location_filter)
        and keywords_match(event, subscription.keyword_filter)
    )


def match_subscribers(
    event: Event,
    subscriptions: Iterable[NewsletterSubscription],
) -> list[NewsletterSubscription]:
    """Return the subscriptions that should hear about `event`. Order is not significant."""
    return [sub for sub in subscriptions if subscription_matches(event, sub)]
