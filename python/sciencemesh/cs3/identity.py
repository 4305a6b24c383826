"""
CS3 identity message types (users)
"""
from enum import IntEnum

from .base import Message, Field

class UserType(IntEnum):
    INVALID = 0
    PRIMARY = 1
    SECONDARY = 2
    SERVICE = 3
    APPLICATION = 4
    GUEST = 5
    FEDERATED = 6
    LIGHTWEIGHT = 7

class UserId(Message):
    """
    the unique identity of a user:  the identity provider (``idp``) that vouches for the user and
    the user's (opaque) identifier within that provider.
    """
    _fields = [
        Field("idp",       "idp"),
        Field("opaque_id", "opaque_id"),
        Field("type",      "type", UserType, UserType.INVALID)
    ]

class User(Message):
    """
    a description of an authenticated user.  The ``username`` is what selects the user's space
    in the backing storage service.
    """
    _fields = [
        Field("id",           "id", UserId),
        Field("username",     "username"),
        Field("mail",         "mail"),
        Field("display_name", "display_name")
    ]
