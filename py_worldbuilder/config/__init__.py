"""
Configuration modules for the geometry engine.
"""

from .config import Settings, settings
from .generation import GenerationParameters, default_parameters

__all__ = ['Settings', 'settings', 'GenerationParameters', 'default_parameters']
