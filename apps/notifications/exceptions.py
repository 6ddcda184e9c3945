"""
Domain exceptions for notifications app.

Delivery errors are raised by sinks and always handled by the tracker;
they never reach a view.
"""


class NotificationsServiceError(Exception):
    """Base exception for notification service errors."""
    pass


class NotificationNotFoundError(NotificationsServiceError):
    """Raised when a notification does not exist for the user."""
    pass


class NotificationDeliveryError(NotificationsServiceError):
    """Raised by a sink when a notification could not be delivered."""
    pass
