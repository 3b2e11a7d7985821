"""
Core Layer.

The ``WebLab`` facade combining the scraping and REST access paths.
"""

from .weblab import WebLab

__all__ = ["WebLab"]
