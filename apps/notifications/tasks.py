"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Notification
from .services import send_email_notification

logger = logging.getLogger(__name__)


@shared_task(name="notifications.deliver_email_notification")
def deliver_email_notification(notification_id: int) -> bool:
    """Send the email copy of an in-app notification once."""

    try:
        notification = Notification.objects.select_related("user").get(pk=notification_id)
    except Notification.DoesNotExist:
        logger.warning(f"Notification {notification_id} disappeared before email delivery")
        return False

    if notification.email_sent_at is not None:
        return True

    sent = send_email_notification(
        recipient_email=notification.user.email,
        subject=notification.title,
        template_name=None,
        context={"message": notification.message},
    )
    if sent:
        notification.email_sent_at = timezone.now()
        notification.save(update_fields=["email_sent_at"])
    return sent
