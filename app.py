"""Streamlit UI for the job scout: settings, keywords, manual scrape, shortlist."""
from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from jobscout.agent import build_scout
from jobscout.log import get_logger
from jobscout.messaging import SCRAPER_DONE, SCRAPER_LOG, SCRAPER_PROGRESS, Message
from jobscout.scraper import format_preview

log = get_logger(__name__)

st.set_page_config(page_title="Job Scout", page_icon="🔎", layout="wide")


@st.cache_resource
def _scout():
    return build_scout()


scout = _scout()


# ── Pages ────────────────────────────────────────────────────────────────


def page_dashboard() -> None:
    st.header("Dashboard")

    settings = scout.session.settings
    stored = scout.shortlist_store.load()
    c1, c2, c3 = st.columns(3)
    c1.metric("Refresh", f"{settings.refresh_minutes} min")
    c2.metric("Status", "Paused" if settings.scrape_paused else "Active")
    c3.metric("Shortlisted", len(stored))

    st.divider()
    if st.button("Scrape now", type="primary", use_container_width=True):
        _scrape_now()

    result = st.session_state.get("last_result")
    if result:
        c1, c2, c3 = st.columns(3)
        c1.metric("Scraped", result.get("scraped", 0))
        c2.metric("Shortlisted", result.get("shortlisted", 0))
        c3.metric("New", result.get("new", 0))
        if result.get("new_jobs"):
            with st.expander("New jobs", expanded=True):
                st.text(format_preview(result["new_jobs"]))


def _scrape_now() -> None:
    from jobscout.browser import BrowserSession
    from jobscout.scheduler import Scheduler

    cfg = scout.config
    with st.status("Opening the listing page…", expanded=True) as sw:
        progress = st.progress(0.0)

        def on_message(message: Message) -> None:
            if message.type == SCRAPER_LOG:
                sw.write(message.payload)
            elif message.type == SCRAPER_PROGRESS:
                p = message.payload
                progress.progress(p["current"] / max(p["total"], 1), text=f"Progress: {p['current']}/{p['total']}")
            elif message.type == SCRAPER_DONE:
                sw.write(f"Collected {len(message.payload)} jobs.")

        detach = scout.channel.subscribe(on_message)
        browser = BrowserSession(headless=bool(cfg["headless"]), user_data_dir=cfg["user_data_dir"] or None)
        try:
            result = Scheduler(scout, browser).run_cycle(reload=True)
        finally:
            detach()
            browser.close()

        st.session_state["last_result"] = result
        if result["ok"]:
            sw.update(label="Scrape complete!", state="complete")
        else:
            sw.update(label="Scrape failed", state="error")
            st.error(result["error"])


def page_shortlist() -> None:
    st.header("Shortlist")
    updated = scout.shortlist_store.updated_at()
    st.caption(f"Last updated: {updated or 'never'}")

    jobs = scout.shortlist_store.preview()
    if not jobs:
        st.info("Nothing shortlisted yet. Run a scrape from the **Dashboard**.")
    else:
        st.dataframe(
            [
                {
                    "Title": j.title,
                    "Payment": j.payment,
                    "Budget": j.budget,
                    "Level": j.experience_level,
                    "Posted": j.posted,
                    "Skills": ", ".join(j.skills),
                    "Client": j.client_country,
                    "URL": j.url,
                }
                for j in jobs
            ],
            use_container_width=True,
            column_config={"URL": st.column_config.LinkColumn("URL")},
        )

    if st.button("Clear shortlist"):
        scout.shortlist_store.clear()
        st.success("Shortlist cleared.")
        st.rerun()


def page_settings() -> None:
    st.header("Settings")
    settings = scout.session.settings

    with st.form("settings"):
        minutes = st.number_input("Refresh interval (minutes)", min_value=1, value=settings.refresh_minutes, step=1)
        paused = st.checkbox("Pause scheduled scraping", value=settings.scrape_paused)
        if st.form_submit_button("Save"):
            try:
                scout.session.update_settings(refresh_minutes=int(minutes), scrape_paused=paused)
                st.success(f"Saved refresh interval: {int(minutes)} minute(s).")
            except ValueError as exc:
                st.error(str(exc))

    st.subheader("Keywords")
    st.caption("A job is shortlisted when any keyword appears in its title, description or skills. "
               "No keywords means every job is kept.")
    with st.form("add_keyword", clear_on_submit=True):
        new_kw = st.text_input("Add keyword")
        if st.form_submit_button("Add") and new_kw.strip():
            if not scout.session.add_keyword(new_kw):
                st.warning(f"“{new_kw.strip()}” is already in the list.")

    for kw in scout.session.keywords:
        c1, c2 = st.columns([5, 1])
        c1.markdown(f"- {kw}")
        if c2.button("Remove", key=f"rm_{kw}"):
            scout.session.remove_keyword(kw)
            st.rerun()


pages = [
    st.Page(page_dashboard, title="Dashboard", icon="🚀", url_path="dashboard", default=True),
    st.Page(page_shortlist, title="Shortlist", icon="📋", url_path="shortlist"),
    st.Page(page_settings, title="Settings", icon="⚙️", url_path="settings"),
]

nav = st.navigation(pages)
nav.run()
