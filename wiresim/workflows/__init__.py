"""
wiresim workflows module.

Workflow functions for the two simulation phases.
INIT builds the job context once; process turns one event into RawDigits.
"""

from .initialization import initialize
from .assembly import process, charges_from_deposits

__all__ = [
    'initialize',
    'process',
    'charges_from_deposits',
]
