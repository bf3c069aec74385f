from jobscout.models import JobRecord, record_key
from jobscout.scraper import run_scrape


def test_three_cards_two_titled_one_python(scout, session, listing_page, notifier):
    session.set_keywords(["python"])
    batch = run_scrape(listing_page).jobs

    summary = scout.pipeline.process(batch)

    assert len(batch) == 2
    assert summary["shortlisted"] == 1
    assert summary["new"] == 1
    assert [j.title for j in summary["new_jobs"]] == ["Python Developer"]
    assert len(scout.shortlist_store.load()) == 1
    assert notifier.sent == [(
        "Python Developer",
        "Hourly: $30.00 - $60.00 • Expert • Posted 5 minutes ago",
        "https://www.upwork.com/jobs/Python-Developer_~111/",
    )]


def test_updated_record_is_not_renotified(scout, notifier):
    scout.pipeline.process([JobRecord(uid="9", title="Go dev")])
    summary = scout.pipeline.process([JobRecord(uid="9", title="Go developer (updated)")])
    assert summary["new"] == 0
    assert len(notifier.sent) == 1
    assert scout.shortlist_store.load()["9"].title == "Go developer (updated)"


def test_duplicate_ids_within_a_batch_count_once(scout, notifier):
    summary = scout.pipeline.process([JobRecord(uid="7", title="A"), JobRecord(uid="7", title="A again")])
    assert summary["new"] == 1
    assert scout.shortlist_store.load()["7"].title == "A again"


def test_record_key_fallback_chain():
    assert record_key(JobRecord(uid="u", url="x", title="t")) == "u"
    assert record_key(JobRecord(url="x", title="t")) == "x"
    assert record_key(JobRecord(title="t")) == "t"
    serialized = record_key(JobRecord(snippet="only a snippet"))
    assert '"snippet": "only a snippet"' in serialized


def test_from_dict_ignores_unknown_keys():
    job = JobRecord.from_dict({"title": "T", "skills": None, "legacy_field": 1})
    assert job == JobRecord(title="T")
