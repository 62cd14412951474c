"""
wiresim: raw-digit simulation for TPC wire planes.

Charge deposits are convolved with field x electronics transfer functions,
summed with synthesized noise, digitized and compressed into RawDigits.
"""

__version__ = "0.1.0"
