"""Command-line surface: scheduler loop, one-off runs, settings, keywords, shortlist."""
from __future__ import annotations

import argparse
import signal
from typing import Sequence

from jobscout.agent import Scout, build_scout
from jobscout.log import configure, get_logger
from jobscout.scraper import format_preview

log = get_logger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobscout", description="Scrape, shortlist and notify job listings.")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Scrape now, then keep refreshing on the timer")
    run.add_argument("--no-start", action="store_true", help="Wait for the first timer tick instead of scraping now")
    sub.add_parser("once", help="Run a single scrape cycle and exit")
    sub.add_parser("pause", help="Stop timer-driven scrapes")
    sub.add_parser("resume", help="Re-enable timer-driven scrapes")
    sub.add_parser("status", help="Show settings and shortlist size")

    interval = sub.add_parser("interval", help="Set the refresh interval")
    interval.add_argument("minutes", help="Whole minutes, >= 1")

    kw = sub.add_parser("keywords", help="Manage shortlist keywords")
    kw_sub = kw.add_subparsers(dest="action", required=True)
    kw_sub.add_parser("list")
    for action in ("add", "remove"):
        p = kw_sub.add_parser(action)
        p.add_argument("words", nargs="+")

    sl = sub.add_parser("shortlist", help="Show (or clear) the stored shortlist")
    sl.add_argument("--clear", action="store_true")
    return parser


def _make_scheduler(scout: Scout):
    # deferred: only commands that drive the browser need Playwright
    from jobscout.browser import BrowserSession
    from jobscout.scheduler import Scheduler

    cfg = scout.config
    browser = BrowserSession(headless=bool(cfg["headless"]), user_data_dir=cfg["user_data_dir"] or None)
    return Scheduler(scout, browser), browser


def _print_summary(summary: dict) -> None:
    if not summary.get("ok"):
        print(f"✗ {summary.get('error') or 'scrape failed'}")
        return
    print(f"✓ scraped {summary['scraped']} · shortlisted {summary['shortlisted']} · new {summary['new']}")
    if summary["new_jobs"]:
        print(format_preview(summary["new_jobs"]))


def _cmd_run(scout: Scout, args) -> int:
    scheduler, browser = _make_scheduler(scout)
    signal.signal(signal.SIGTERM, lambda *_: scheduler.stop())
    try:
        scheduler.run_forever(start_now=not args.no_start)
    except KeyboardInterrupt:
        scheduler.stop()
    finally:
        browser.close()
    return 0


def _cmd_once(scout: Scout, args) -> int:
    scheduler, browser = _make_scheduler(scout)
    try:
        summary = scheduler.run_cycle(reload=True)
    finally:
        browser.close()
    _print_summary(summary)
    return 0 if summary["ok"] else 1


def _cmd_status(scout: Scout, args) -> int:
    settings = scout.session.settings
    print(f"Refresh interval : {settings.refresh_minutes} min")
    print(f"Paused           : {'yes' if settings.scrape_paused else 'no'}")
    print(f"Keywords         : {', '.join(scout.session.keywords) or '(none — every job is kept)'}")
    print(f"Shortlisted jobs : {len(scout.shortlist_store.load())}")
    print(f"Last update      : {scout.shortlist_store.updated_at() or 'never'}")
    return 0


def _cmd_interval(scout: Scout, args) -> int:
    try:
        settings = scout.session.update_settings(refresh_minutes=args.minutes)
    except ValueError as exc:
        print(f"✗ {exc}")
        return 2
    print(f"Saved refresh interval: {settings.refresh_minutes} minute(s).")
    return 0


def _cmd_keywords(scout: Scout, args) -> int:
    session = scout.session
    if args.action == "add":
        for word in args.words:
            print(f"{'+' if session.add_keyword(word) else '='} {word}")
    elif args.action == "remove":
        for word in args.words:
            print(f"{'-' if session.remove_keyword(word) else '?'} {word}")
    for kw in session.keywords:
        print(f"  {kw}")
    return 0


def _cmd_shortlist(scout: Scout, args) -> int:
    if args.clear:
        scout.shortlist_store.clear()
        print("Shortlist cleared.")
        return 0
    jobs = scout.shortlist_store.preview()
    if not jobs:
        print("Shortlist is empty.")
        return 0
    for i, job in enumerate(jobs, 1):
        meta = " · ".join(p for p in (job.payment, job.experience_level, job.posted) if p)
        print(f"{i:>3}. {job.title}" + (f"  [{meta}]" if meta else ""))
        if job.url:
            print(f"     {job.url}")
    return 0


def _cmd_pause(scout: Scout, args) -> int:
    scout.session.update_settings(scrape_paused=True)
    print("Scraping paused.")
    return 0


def _cmd_resume(scout: Scout, args) -> int:
    scout.session.update_settings(scrape_paused=False)
    print("Scraping resumed.")
    return 0


COMMANDS = {
    "run": _cmd_run,
    "once": _cmd_once,
    "pause": _cmd_pause,
    "resume": _cmd_resume,
    "status": _cmd_status,
    "interval": _cmd_interval,
    "keywords": _cmd_keywords,
    "shortlist": _cmd_shortlist,
}


def main(argv: Sequence[str] | None = None, scout: Scout | None = None) -> int:
    args = _parser().parse_args(argv)
    if args.log_level:
        configure(args.log_level)
    scout = scout or build_scout()
    return COMMANDS[args.command](scout, args)
