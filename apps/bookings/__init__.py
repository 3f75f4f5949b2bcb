"""Bookings app package.

Booking requests for vehicles and drivers, their status lifecycle and the
admission gate that re-checks availability under row locks before a
request is stored as PENDING.
"""
