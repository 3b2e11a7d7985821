"""
Defines custom exceptions for the library to allow for more specific error handling.
"""


class WebLabError(Exception):
    """Base exception for all library-specific errors."""


class ConfigurationError(WebLabError):
    """Raised for issues related to configuration loading or validation."""


class AuthenticationError(WebLabError):
    """Raised when an access path is used without the credential it requires."""


class ScrapeError(WebLabError):
    """Raised when a WebLab page could not be fetched."""


class PageLayoutError(ScrapeError):
    """
    Raised when a fetched page does not match the expected page layout,
    e.g. a missing table, a missing child element or a failed regex match.
    """
