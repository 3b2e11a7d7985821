"""
Storage Layer.

Loading and saving of the INI configuration file.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
