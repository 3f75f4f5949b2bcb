"""Notification services.

``notify`` is the sink the availability and booking engine talks to. It
never raises: a notification that cannot be stored or sent is logged and
dropped, and the caller's own work stays committed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.db import transaction  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

from .models import Notification, NotificationType

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send a single email.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        template_name: Optional Django template rendered with ``context``
        context: Template context; ``context["message"]`` is the plain body
            when no template or HTML is given
        html_message: Ready HTML body (optional)

    Returns:
        bool: True if the email was handed to the backend
    """
    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


# ============================================================================
# IN-APP
# ============================================================================

def create_in_app_notification(
    user: "CustomUser",
    notification_type: str,
    title: str,
    message: str,
    metadata: dict[str, Any] | None = None,
) -> Notification | None:
    """
    Store an in-app notification.

    The insert runs in its own savepoint, so a failure here leaves an
    enclosing transaction usable.
    """
    try:
        with transaction.atomic():
            notification = Notification.objects.create(
                user=user,
                type=notification_type,
                title=title,
                message=message,
                metadata=metadata or {},
            )
        logger.info(f"In-app notification {notification_type} created for user {user.pk}: {title}")
        return notification

    except Exception as e:
        logger.error(f"Failed to create in-app notification for user {user.pk}: {e}", exc_info=True)
        return None


def _queue_email(notification: Notification) -> None:
    from .tasks import deliver_email_notification

    def enqueue():
        try:
            deliver_email_notification.delay(notification.pk)
        except Exception as e:
            logger.error(f"Failed to queue email for notification {notification.pk}: {e}", exc_info=True)

    transaction.on_commit(enqueue)


def notify(
    user: "CustomUser",
    notification_type: str,
    title: str,
    message: str,
    metadata: dict[str, Any] | None = None,
    *,
    email: bool = True,
) -> Notification | None:
    """
    Notify a user in-app and (after commit) by email.

    Fire-and-forget: returns the stored notification, or None when it
    could not be stored. Never raises.
    """
    try:
        notification = create_in_app_notification(user, notification_type, title, message, metadata)
        if notification is not None and email and user.email:
            _queue_email(notification)
        return notification
    except Exception as e:
        logger.error(f"Failed to notify user {getattr(user, 'pk', None)}: {e}", exc_info=True)
        return None


def notify_many(
    users: Iterable["CustomUser"],
    notification_type: str,
    title: str,
    message: str,
    metadata: dict[str, Any] | None = None,
) -> list[Notification]:
    """Notify each distinct user once."""

    sent: list[Notification] = []
    seen: set[int] = set()
    for user in users:
        if user is None or user.pk in seen:
            continue
        seen.add(user.pk)
        notification = notify(user, notification_type, title, message, metadata)
        if notification is not None:
            sent.append(notification)
    return sent


__all__ = [
    "NotificationType",
    "create_in_app_notification",
    "notify",
    "notify_many",
    "send_email_notification",
]
