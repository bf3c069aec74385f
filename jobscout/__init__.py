"""Job scout: scrape a job-listing page, shortlist by keyword, notify."""

__version__ = "0.1.0"
