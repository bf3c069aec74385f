from jobscout.models import JobRecord
from jobscout.shortlist import ShortlistStore, merge_records, shortlist


def _job(**kw) -> JobRecord:
    return JobRecord(**kw)


REACT = _job(uid="1", title="Frontend dev", skills=["React.js", "CSS"])
VUE = _job(uid="2", title="Frontend dev", snippet="no match here", skills=["Vue"])
PY = _job(uid="3", title="Senior Python Developer", snippet="Django")


def test_empty_keywords_is_identity():
    batch = [REACT, VUE, PY]
    assert shortlist(batch, []) == batch
    assert shortlist(batch, ["  ", ""]) == batch


def test_keyword_substring_case_insensitive_over_skills():
    assert shortlist([REACT, VUE], ["react"]) == [REACT]


def test_any_keyword_matches_and_order_is_kept():
    assert shortlist([PY, VUE, REACT], ["REACT", "django"]) == [PY, REACT]


def test_keyword_matches_snippet():
    assert shortlist([REACT, VUE], ["MATCH here"]) == [VUE]


def test_shortlist_does_not_mutate_input():
    batch = [REACT, VUE]
    shortlist(batch, ["react"])
    assert batch == [REACT, VUE]


def test_merge_overwrites_whole_record():
    existing = {"1": _job(uid="1", title="Old", url="u1", budget="$100")}
    merged = merge_records(existing, [_job(uid="1", title="New", url="u1")])
    assert merged["1"].title == "New"
    assert merged["1"].budget == ""
    assert existing["1"].title == "Old"


def test_merge_is_idempotent(shortlist_store):
    batch = [REACT, VUE, PY]
    once = shortlist_store.merge(batch)
    twice = shortlist_store.merge(batch)
    assert once == twice
    assert list(twice) == ["1", "2", "3"]


def test_merge_keys_fall_back_to_url_then_title(shortlist_store):
    merged = shortlist_store.merge([_job(url="https://x/jobs/~5", title="A"), _job(title="Only title")])
    assert set(merged) == {"https://x/jobs/~5", "Only title"}


def test_store_round_trips_records(store, shortlist_store):
    shortlist_store.merge([REACT])
    reloaded = ShortlistStore(store).load()
    assert reloaded == {"1": REACT}
    assert reloaded["1"].skills == ["React.js", "CSS"]


def test_overwrite_keeps_insertion_position(shortlist_store):
    shortlist_store.merge([REACT, VUE])
    shortlist_store.merge([_job(uid="1", title="React lead")])
    assert [j.title for j in shortlist_store.preview()] == ["React lead", "Frontend dev"]


def test_clear_empties_and_moves_timestamp(shortlist_store):
    shortlist_store.merge([REACT])
    before = shortlist_store.updated_at()
    shortlist_store.clear()
    assert shortlist_store.preview() == []
    assert shortlist_store.load() == {}
    assert shortlist_store.updated_at() != before


def test_preview_is_capped(store):
    capped = ShortlistStore(store, preview_size=2)
    capped.merge([REACT, VUE, PY])
    assert [j.uid for j in capped.preview()] == ["1", "2"]
    assert len(capped.load()) == 3


def test_untouched_store_has_no_timestamp(shortlist_store):
    assert shortlist_store.updated_at() is None
    assert shortlist_store.preview() == []
