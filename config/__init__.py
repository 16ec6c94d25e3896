"""
Configuration module for the note layout engine.
"""
from .constants import *
from .logging_config import setup_logger

__all__ = [
    # Logging
    'setup_logger',
    # Constants (all exported via *)
]
