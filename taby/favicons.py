"""
Favicon resolution for cards.

Runs once per fetch: every card gets a display icon URL written to its
``favicon`` field, so rendering never has to resolve icons again.
"""
from typing import Dict, Iterable, Optional
from urllib.parse import quote, urlparse

from taby.constants import BROWSER_INTERNAL_PREFIXES, FALLBACK_FAVICON_URL, ICON_PROXY_URL
from taby.models import Card, Favicon, SyncData


def get_proxied_favicon(url: str) -> str:
    """Route an absolute icon URL through the image proxy."""
    return ICON_PROXY_URL.format(url=quote(url, safe=""))


def get_fallback_favicon(url: str) -> str:
    """
    Favicon-by-domain URL for a page.

    Returns an empty string when the URL has no usable hostname.
    """
    try:
        domain = urlparse(url).hostname
    except ValueError:
        return ""
    if not domain:
        return ""
    return FALLBACK_FAVICON_URL.format(domain=domain)


def _from_icon_url(url: str) -> str:
    return get_proxied_favicon(url) if url.startswith("http") else url


def build_favicons_map(favicons: Iterable[Favicon]) -> Dict[int, str]:
    return {favicon.id: favicon.url for favicon in favicons}


def resolve_card_favicon(card: Card, favicons_by_id: Dict[int, str]) -> Optional[str]:
    """
    Resolve a card's display icon.

    Precedence: inline favicon, favicon table entry, no icon for
    browser-internal pages, then the favicon-by-domain service.
    """
    if card.favicon:
        return _from_icon_url(card.favicon)

    if card.favicon_id is not None:
        favicon_url = favicons_by_id.get(card.favicon_id)
        if favicon_url:
            return _from_icon_url(favicon_url)

    if card.url.startswith(BROWSER_INTERNAL_PREFIXES):
        return None

    return get_fallback_favicon(card.url)


def enrich_cards_with_favicons(data: SyncData) -> SyncData:
    """Write the resolved favicon onto every card of the snapshot, in place."""
    favicons_by_id = build_favicons_map(data.favicons)
    for card in data.cards:
        card.favicon = resolve_card_favicon(card, favicons_by_id)
    return data
