"""
Web Scraping Layer.

Cookie-authenticated fetching of WebLab pages and the page layout contract
used to parse them.
"""

from .layout import LAYOUT_VERSION, parse_submission, parse_submissions
from .scraper import WebLabScraper

__all__ = ["LAYOUT_VERSION", "WebLabScraper", "parse_submission", "parse_submissions"]
