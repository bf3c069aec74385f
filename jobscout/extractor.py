"""Turn one job-card node into a JobRecord.

Every field is described by an ordered tuple of ``Pick`` strategies in
``FIELD_STRATEGIES``; the first strategy that produces a non-empty value wins.
Missing nodes give ``""``; nothing here raises for absent markup.
"""
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import Tag

from jobscout.models import JobRecord

TITLE_LINK = '[data-test="job-tile-title-link"]'
ANY_JOB_LINK = 'a[href*="/jobs/"]'
SKILL_TOKENS = '[data-test="TokenClamp JobAttrs"] [data-test="token"]'
LEGACY_SKILL_TOKENS = '[data-test="token-Chip"]'
UID_ATTRIBUTES = ("data-ev-job-uid", "data-job-uid")


@dataclass(frozen=True)
class Pick:
    """Read text (or ``attr``) from the first node matching ``selector``."""

    selector: str
    attr: str | None = None

    def read(self, card: Tag) -> str:
        node = card.select_one(self.selector)
        if node is None:
            return ""
        if self.attr:
            value = node.get(self.attr) or ""
            if isinstance(value, list):  # multi-valued attrs such as class
                value = " ".join(value)
            return value.strip()
        return clean_text(node)


FIELD_STRATEGIES: dict[str, tuple[Pick, ...]] = {
    "title": (Pick(TITLE_LINK), Pick(ANY_JOB_LINK)),
    "url": (Pick(TITLE_LINK, "href"), Pick(ANY_JOB_LINK, "href")),
    "snippet": (Pick('[data-test="UpCLineClamp JobDescription"]'), Pick('[data-test="job-description-text"]')),
    "payment": (Pick('[data-test="job-type-label"]'),),
    "budget": (Pick('[data-test="is-fixed-price"]'),),
    # the job-type label carries the hourly range ("Hourly: $30.00 - $60.00")
    "hourly": (Pick('[data-test="job-type-label"]'),),
    "posted": (Pick('[data-test="job-pubilshed-date"]'), Pick('[data-test="job-published-date"]')),
    "num_proposals": (Pick('[data-test="proposals-tier"]'),),
    "experience_level": (Pick('[data-test="experience-level"]'), Pick('[data-test="contractor-tier"]')),
    "duration": (Pick('[data-test="duration-label"]'),),
    "workload": (Pick('[data-test="workload"]'),),
    "location_requirement": (Pick('[data-test="location"]'), Pick('[data-test*="location"]')),
    "client_country": (Pick('[data-test="location"]'),),
    "client_payment_verified": (Pick('[data-test="payment-verified"]'),),
    # older tiles label the spend "total-spent"
    "client_spend": (Pick('[data-test="total-spend"]'), Pick('[data-test="total-spent"]')),
    "client_jobs_posted": (Pick('[data-test="client-jobs-posted"]'),),
    "client_hire_rate": (Pick('[data-test="client-hire-rate"]'),),
    "client_rating": (
        Pick('[data-test="total-feedback"] [aria-label]', "aria-label"),
        Pick('[data-test="total-feedback"]'),
    ),
}


def clean_text(node: Tag) -> str:
    return " ".join(node.get_text(" ").split())


def first_value(card: Tag, strategies: tuple[Pick, ...]) -> str:
    for pick in strategies:
        value = pick.read(card)
        if value:
            return value
    return ""


def extract_skills(card: Tag) -> list[str]:
    """Token texts under the skills container, else legacy chips; exact-match dedupe."""
    tokens = [clean_text(n) for n in card.select(SKILL_TOKENS)]
    tokens = [t for t in tokens if t]
    if not tokens:
        tokens = [t for t in (clean_text(n) for n in card.select(LEGACY_SKILL_TOKENS)) if t]
    return list(dict.fromkeys(tokens))


def extract_uid(card: Tag) -> str:
    for attr in UID_ATTRIBUTES:
        value = card.get(attr)
        if value:
            return str(value).strip()
    return ""


def extract_job(card: Tag, base_url: str = "") -> JobRecord:
    values = {name: first_value(card, picks) for name, picks in FIELD_STRATEGIES.items()}
    if values["url"]:
        values["url"] = urljoin(base_url, values["url"]) if base_url else values["url"]
    return JobRecord(uid=extract_uid(card), skills=extract_skills(card), **values)
