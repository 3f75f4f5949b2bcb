from django.apps import AppConfig  # type: ignore


class NotificationsConfig(AppConfig):
    name = 'apps.notifications'
    label = 'notifications'

    def ready(self):
        from .handlers import register_handlers

        register_handlers()
