"""
the context of a storage request:  who is making the request and where to log messages about it.
"""
import logging
from typing import Optional

from sciencemesh.cs3.identity import User
from .exceptions import UserRequired

class Context(object):
    """
    a container for request-scoped information passed to every storage operation.

    :param User user:   the authenticated user making the request; the storage driver acts
                        within this user's space.
    :param Logger log:  the Logger to send messages about this request to.  If not provided,
                        the driver's own Logger is used.
    """
    def __init__(self, user: User=None, log: logging.Logger=None):
        self.user = user
        self.log = log

    def __str__(self):
        return "Context(%s)" % (self.user.username if self.user else "(anonymous)")

def get_user(ctx: Context) -> User:
    """
    return the user attached to the given context
    :raises UserRequired:  if no user is attached
    """
    u = getattr(ctx, 'user', None) if ctx else None
    if u is None:
        raise UserRequired("nextcloud storage driver: error getting user from ctx: user required")
    return u

def get_logger(ctx: Optional[Context], default: logging.Logger=None) -> logging.Logger:
    """
    return the Logger attached to the given context, or ``default`` if none is attached.
    """
    log = getattr(ctx, 'log', None) if ctx else None
    if log is None:
        log = default or logging.getLogger("storage")
    return log
