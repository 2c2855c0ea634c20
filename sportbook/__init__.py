"""
Sportbook booking core.

Availability, recurring-booking expansion, conflict detection, pricing,
reschedules, reviews and messaging for a sports teacher marketplace.
"""

__version__ = "0.1.0"
