"""
Service layer for the Sportbook booking core.

Import services from their modules, e.g.
``from sportbook.services.booking_service import BookingService``.
"""
