"""Data models for scraped job cards and scrape outcomes."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any


@dataclass
class JobRecord:
    title: str = ""
    url: str = ""
    snippet: str = ""
    uid: str = ""  # site-provided job id (data-ev-job-uid / data-job-uid)
    payment: str = ""
    budget: str = ""
    hourly: str = ""
    experience_level: str = ""
    duration: str = ""
    workload: str = ""
    posted: str = ""
    num_proposals: str = ""
    location_requirement: str = ""
    skills: list[str] = field(default_factory=list)
    client_country: str = ""
    client_payment_verified: str = ""
    client_spend: str = ""
    client_jobs_posted: str = ""
    client_hire_rate: str = ""
    client_rating: str = ""

    @property
    def id(self) -> str:
        return record_key(self)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobRecord":
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        kwargs["skills"] = list(kwargs.get("skills") or [])
        return cls(**kwargs)


def record_key(job: JobRecord) -> str:
    """Dedup key: site uid, then url, then title, then the whole record.

    The last fallback changes whenever any field text changes, so records
    that only have it can reappear as new entries on the next scrape.
    """
    if job.uid:
        return job.uid
    if job.url:
        return job.url
    if job.title:
        return job.title
    return json.dumps(asdict(job), sort_keys=True, ensure_ascii=False)


@dataclass
class PageSnapshot:
    url: str
    html: str


@dataclass
class ScrapeResult:
    ok: bool
    jobs: list[JobRecord] = field(default_factory=list)
    error: str = ""
