from .user_data import UserData

__all__ = [
    "UserData",
]
