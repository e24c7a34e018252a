from hintstore.models.notification_hint import NotificationHint

__all__ = [
    'NotificationHint',
]
