from guestbook.models.guest import Guest
from guestbook.models.guest_group import GuestGroup

__all__ = ["Guest", "GuestGroup"]
