"""Availability app package.

Manual blocks, recurring weekly block patterns and the read services that
combine them with bookings: conflict checks, analytics and calendar export.
"""
