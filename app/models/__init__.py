
from app.models.checkin_item import CheckInItem
from app.models.user import User

__all__ = [ "CheckInItem", "User" ]
