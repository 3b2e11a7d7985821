"""
Async client for the WebLab platform: HTML scraping of submission pages and
the signed REST API for submission data and grade pushing.
"""

__version__ = "0.3.0"

from .core.weblab import WebLab

__all__ = ["WebLab", "__version__"]
