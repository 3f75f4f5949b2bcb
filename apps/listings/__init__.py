"""Listings app package.

Vehicle and driver offerings owned by a provider company. Availability
and bookings refer to a listing by ``(listing_type, listing_id)``.
"""
