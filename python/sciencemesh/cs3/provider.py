"""
CS3 storage-provider message types:  references to resources, resource metadata, grants,
file versions, recycle-bin items, and storage spaces.
"""
from collections import OrderedDict
from collections.abc import Mapping
from enum import IntEnum

from .base import Message, Field
from .identity import UserId, User, UserType

class ResourceType(IntEnum):
    INVALID = 0
    FILE = 1
    CONTAINER = 2
    REFERENCE = 3
    SYMLINK = 4
    INTERNAL = 5

class GranteeType(IntEnum):
    INVALID = 0
    USER = 1
    GROUP = 2

class SpaceFilterType(IntEnum):
    INVALID = 0
    ID = 1
    OWNER = 2
    SPACE_TYPE = 3

class Timestamp(Message):
    _fields = [
        Field("seconds", "seconds", None, 0),
        Field("nanos",   "nanos",   None, 0)
    ]

class ResourceId(Message):
    """
    identifies a resource independent of its path
    """
    _fields = [
        Field("storage_id", "storage_id"),
        Field("opaque_id",  "opaque_id")
    ]

class Reference(Message):
    """
    a pointer to a resource, either by path, by :py:class:`ResourceId`, or by a path relative
    to a :py:class:`ResourceId`.
    """
    _fields = [
        Field("resource_id", "resource_id", ResourceId),
        Field("path",        "path")
    ]

class ResourceChecksum(Message):
    _fields = [
        Field("type", "type", None, 0),
        Field("sum",  "sum")
    ]

class ArbitraryMetadata(Message):
    """
    user-defined key-value metadata attached to a resource
    """
    _fields = [
        Field("metadata", "metadata", None, OrderedDict)
    ]

PERMISSION_NAMES = ("add_grant create_container delete get_path get_quota initiate_file_download "
                    "initiate_file_upload list_grants list_container list_file_versions list_recycle "
                    "move remove_grant purge_recycle restore_file_version restore_recycle_item stat "
                    "update_grant").split()

class ResourcePermissions(Message):
    """
    the set of operations permitted on a resource.  Each permission is a boolean attribute named
    after the operation (see ``PERMISSION_NAMES``).
    """
    _fields = [Field(p, p, None, False) for p in PERMISSION_NAMES]

    @classmethod
    def from_dict(cls, data: Mapping):
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise ValueError("ResourcePermissions.from_dict(): data is not an object: "+repr(data))
        bad = [p for p in PERMISSION_NAMES if p in data and not isinstance(data[p], bool)]
        if bad:
            raise ValueError("ResourcePermissions.from_dict(): non-boolean permission values: " +
                             ", ".join(bad))
        return super(ResourcePermissions, cls).from_dict(data)

    def granted(self):
        """
        return the names of the permissions that are set
        """
        return [p for p in PERMISSION_NAMES if getattr(self, p)]

class Grantee(Message):
    """
    the identity that a grant applies to.  The identity is encoded as a one-of wrapper:
    ``{"type": 1, "Id": {"UserId": {...}}}``.
    """
    _fields = [
        Field("type",    "type", GranteeType, GranteeType.INVALID),
        Field("user_id", "Id",   UserId)
    ]

    def to_dict(self) -> Mapping:
        out = OrderedDict()
        if self.type:
            out['type'] = int(self.type)
        if self.user_id is not None:
            out['Id'] = OrderedDict([("UserId", self.user_id.to_dict())])
        return out

    @classmethod
    def from_dict(cls, data: Mapping):
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise ValueError("Grantee.from_dict(): data is not an object: "+repr(data))
        uid = None
        ident = data.get("Id")
        if ident is not None:
            if not isinstance(ident, Mapping):
                raise ValueError("Grantee.from_dict(): Id is not an object: "+repr(ident))
            uid = UserId.from_dict(ident.get("UserId"))
        gtype = data.get("type")
        if gtype is None:
            gtype = GranteeType.USER if uid else GranteeType.INVALID
        return cls(type=GranteeType(gtype), user_id=uid)

class Grant(Message):
    """
    a set of permissions given to a grantee on a resource
    """
    _fields = [
        Field("grantee",     "grantee",     Grantee),
        Field("permissions", "permissions", ResourcePermissions)
    ]

class ResourceInfo(Message):
    """
    the metadata describing a file or container
    """
    _fields = [
        Field("type",               "type",               ResourceType, ResourceType.INVALID),
        Field("id",                 "id",                 ResourceId),
        Field("checksum",           "checksum",           ResourceChecksum),
        Field("etag",               "etag"),
        Field("mime_type",          "mime_type"),
        Field("mtime",              "mtime",              Timestamp),
        Field("path",               "path"),
        Field("permission_set",     "permission_set",     ResourcePermissions),
        Field("size",               "size",               None, 0),
        Field("owner",              "owner",              UserId),
        Field("target",             "target"),
        Field("arbitrary_metadata", "arbitrary_metadata", ArbitraryMetadata)
    ]

    @property
    def is_container(self) -> bool:
        return self.type == ResourceType.CONTAINER

class FileVersion(Message):
    """
    a description of a previous version (revision) of a file
    """
    _fields = [
        Field("key",   "key"),
        Field("size",  "size",  None, 0),
        Field("mtime", "mtime", None, 0),
        Field("etag",  "etag")
    ]

class RecycleItem(Message):
    """
    a description of a deleted resource held in the recycle bin
    """
    _fields = [
        Field("key",           "key"),
        Field("ref",           "ref",           Reference),
        Field("size",          "size",          None, 0),
        Field("deletion_time", "deletion_time", Timestamp)
    ]

class StorageSpaceId(Message):
    _fields = [
        Field("opaque_id", "opaque_id")
    ]

class Quota(Message):
    _fields = [
        Field("quota_max_bytes", "quota_max_bytes", None, 0),
        Field("quota_max_files", "quota_max_files", None, 0)
    ]

class StorageSpace(Message):
    """
    a description of a storage space (e.g. a user's home space or a project space)
    """
    _fields = [
        Field("id",         "id",         StorageSpaceId),
        Field("owner",      "owner",      User),
        Field("root",       "root",       ResourceId),
        Field("name",       "name"),
        Field("quota",      "quota",      Quota),
        Field("space_type", "space_type"),
        Field("mtime",      "mtime",      Timestamp)
    ]

class ListStorageSpacesFilter(Message):
    """
    a constraint on the storage spaces returned by a listing.  Which of the term attributes
    (``id``, ``owner``, or ``space_type``) applies is indicated by the ``type``.
    """
    _fields = [
        Field("type",       "type",       SpaceFilterType, SpaceFilterType.INVALID),
        Field("id",         "id",         StorageSpaceId),
        Field("owner",      "owner",      UserId),
        Field("space_type", "space_type")
    ]

class CreateStorageSpaceRequest(Message):
    _fields = [
        Field("owner", "owner", User),
        Field("type",  "type"),
        Field("name",  "name"),
        Field("quota", "quota", Quota)
    ]
