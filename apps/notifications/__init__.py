"""Notifications app package.

In-app notifications with an email copy delivered by a Celery task.
Other apps call :func:`apps.notifications.services.notify` or publish
domain events that the handlers in this package turn into notifications.
"""
