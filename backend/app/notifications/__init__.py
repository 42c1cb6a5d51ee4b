from .gateway import NotificationEvent, notify

__all__ = ["NotificationEvent", "notify"]
