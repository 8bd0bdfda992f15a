from .user import User
from .property import Property
from .interest import Interest
from .notification import Notification, NotificationMessage, NotificationRead, NotificationDeletion

__all__ = ["User", "Property", "Interest", "Notification", "NotificationMessage", "NotificationRead", "NotificationDeletion"]
