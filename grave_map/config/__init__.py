"""
Configuration for the grave map service.
"""

from .config import Settings, settings

__all__ = ['Settings', 'settings']
