"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Booking

logger = logging.getLogger(__name__)

EXPIRED_REASON = "Request was not answered in time"


@shared_task(name="bookings.expire_pending_bookings")
def expire_pending_bookings() -> dict[str, int]:
    """
    Cancel PENDING requests whose ``expires_at`` has passed.

    Cancelling releases the dates held by the request. Runs every few
    minutes through Celery Beat.
    """
    now = timezone.now()
    expired_count = 0

    candidates = Booking.objects.filter(
        status=Booking.Status.PENDING,
        expires_at__lte=now,
    ).values_list("pk", flat=True)

    for booking_id in candidates:
        try:
            with transaction.atomic():
                booking = Booking.objects.select_for_update().get(pk=booking_id)
                if not booking.should_expire():
                    continue
                booking.mark_cancelled(EXPIRED_REASON)
                expired_count += 1
                logger.info("Booking %s expired automatically", booking.booking_number)
        except Booking.DoesNotExist:
            continue
        except Exception as e:
            logger.error(f"Error expiring booking {booking_id}: {e}", exc_info=True)

    if expired_count > 0:
        logger.info(f"Expired {expired_count} pending bookings")

    return {"expired": expired_count}
