"""
Core Domain Components.

Contains the fundamental building blocks of the farm document core,
separated from storage and orchestration.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Business logic separated from models (access, transitions, calculations)
    errors.py: Error tags and response envelope
"""

from . import models
from . import logic

__all__ = [
    'models',
    'logic'
]
