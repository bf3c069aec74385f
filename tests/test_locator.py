from bs4 import BeautifulSoup

from jobscout.locator import find_job_cards

from tests.conftest import LISTING_HTML


def _doc(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_primary_tier_uid_articles_in_document_order():
    cards = find_job_cards(_doc(LISTING_HTML))
    assert [c.get("data-ev-job-uid") or c.get("data-job-uid") for c in cards] == ["111", "222", "333"]


def test_primary_tier_wins_over_generic_tiles():
    html = """
        <div data-test="UpCJobTile">tile</div>
        <article data-job-uid="1">card</article>
    """
    cards = find_job_cards(_doc(html))
    assert len(cards) == 1
    assert cards[0].name == "article"


def test_generic_tiles_inside_list_container():
    html = """
        <div data-test="job-tile-list">
          <section data-test="UpCJobTile"><a href="/jobs/~1">One</a></section>
          <section data-test="UpCJobTile"><a href="/jobs/~2">Two</a></section>
        </div>
        <section data-test="UpCJobTile">outside the list</section>
    """
    cards = find_job_cards(_doc(html))
    assert [c.get_text(strip=True) for c in cards] == ["One", "Two"]


def test_generic_tiles_without_container_search_whole_document():
    html = '<ul><li data-test="job-tile">A</li><li data-test="other">B</li></ul>'
    cards = find_job_cards(_doc(html))
    assert [c.get_text() for c in cards] == ["A"]


def test_link_tier_walks_up_to_container_once_per_ancestor():
    html = """
        <div class="row"><a href="/jobs/~1">First</a> <a href="/jobs/~1#apply">Apply</a></div>
        <div class="row"><span><a href="/jobs/~2">Second</a></span></div>
        <a href="/about">not a job</a>
    """
    cards = find_job_cards(_doc(html))
    assert len(cards) == 2
    assert "First" in cards[0].get_text()
    assert "Second" in cards[1].get_text()


def test_no_recognizable_cards_is_empty_not_error():
    assert find_job_cards(_doc("<html><body><p>Sign in</p></body></html>")) == []
