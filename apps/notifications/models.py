"""Notification model.

A message shown to a user in the web interface; an email copy is sent
asynchronously. ``metadata`` keeps the structured facts behind the message
(listing, dates, booking) so clients can link to them.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore


class NotificationType(models.TextChoices):
    BOOKING_REQUEST_RECEIVED = 'BOOKING_REQUEST_RECEIVED', 'Booking request received'
    BOOKING_REJECTED_BLOCKED_DATES = 'BOOKING_REJECTED_BLOCKED_DATES', 'Booking rejected: blocked dates'
    AVAILABILITY_CONFLICT = 'AVAILABILITY_CONFLICT', 'Availability conflict'
    GENERAL = 'GENERAL', 'General'


class Notification(models.Model):
    """A message sent to a user about some event."""

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notifications'
    )
    type = models.CharField(max_length=40, choices=NotificationType.choices, default=NotificationType.GENERAL)
    title = models.CharField(max_length=255)
    message = models.TextField()
    metadata = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    email_sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'is_read'], name='notification_user_read_idx')]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"

    def mark_read(self) -> None:
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at'])
