"""
Python representations of the CS3 API messages used by storage drivers.

The classes here cover the subset of the CS3 identity and storage-provider APIs needed to
implement a storage driver:

:py:mod:`identity`
    users and user identifiers
:py:mod:`provider`
    references, resource metadata, grants, versions, recycle-bin items, and storage spaces

All message classes support conversion to and from JSON-ready dictionaries via ``to_dict()``
and ``from_dict()`` (see :py:class:`~sciencemesh.cs3.base.Message`).
"""
from .base import Message, Field
from .identity import UserType, UserId, User
from .provider import *
