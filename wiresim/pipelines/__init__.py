"""
wiresim pipelines module.

High-level entry points composing INIT and the per-event workflow.
"""

from .simwire import produce, process_events, simulate_events

__all__ = [
    'produce',
    'process_events',
    'simulate_events',
]
