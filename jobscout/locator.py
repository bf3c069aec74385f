"""Find the job-card nodes on a listing page."""
from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from jobscout.log import get_logger

log = get_logger(__name__)

PRIMARY_CARD_SELECTOR = "article[data-ev-job-uid], article[data-job-uid]"
LIST_CONTAINER_SELECTOR = '[data-test="job-tile-list"]'
TILE_SELECTOR = (
    '[data-test="UpCJobTile"], [data-test="job-tile-list"] article, '
    'article[data-test], li[data-test*="job"]'
)
JOB_LINK_SELECTOR = 'a[href*="/jobs/"]'
CARD_ANCESTORS = ["article", "li", "div"]


def _cards_from_links(document: BeautifulSoup | Tag) -> list[Tag]:
    cards: list[Tag] = []
    seen: set[int] = set()
    for link in document.select(JOB_LINK_SELECTOR):
        card = link.find_parent(CARD_ANCESTORS)
        if card is None or id(card) in seen:
            continue
        seen.add(id(card))
        cards.append(card)
    return cards


def find_job_cards(document: BeautifulSoup | Tag) -> list[Tag]:
    """First non-empty tier wins: uid articles, generic tiles, job-link containers."""
    cards = document.select(PRIMARY_CARD_SELECTOR)
    if cards:
        return cards

    container = document.select_one(LIST_CONTAINER_SELECTOR) or document
    cards = container.select(TILE_SELECTOR)
    if cards:
        log.debug("Primary card selector empty; using %d generic tiles", len(cards))
        return cards

    cards = _cards_from_links(document)
    if cards:
        log.debug("No tiles found; inferred %d cards from job links", len(cards))
    return cards
