"""
The abstract interface for storage drivers.

A storage driver implements the CS3 storage-provider contract:  a filesystem-like set of
operations (create, read, update, delete, metadata, grants, file versions, recycle bin, storage
spaces) against some concrete backend.  Every operation takes a
:py:class:`~sciencemesh.storage.ctx.Context` as its first argument which identifies the user on
whose behalf the operation is carried out.
"""
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import List, Tuple, BinaryIO

from sciencemesh.cs3.provider import (Reference, ResourceId, ResourceInfo, Grant, Grantee, FileVersion,
                                      RecycleItem, ArbitraryMetadata, StorageSpace,
                                      ListStorageSpacesFilter, CreateStorageSpaceRequest)
from .ctx import Context

class FS(ABC):
    """
    an abstract storage driver.  All operations raise a
    :py:class:`~sciencemesh.storage.exceptions.StorageException` (or a subclass) on failure.
    """

    @abstractmethod
    def get_home(self, ctx: Context) -> str:
        """
        return the path to the user's home space
        """
        raise NotImplementedError()

    @abstractmethod
    def create_home(self, ctx: Context) -> None:
        """
        create the user's home space if it does not already exist
        """
        raise NotImplementedError()

    @abstractmethod
    def create_dir(self, ctx: Context, ref: Reference) -> None:
        raise NotImplementedError()

    @abstractmethod
    def delete(self, ctx: Context, ref: Reference) -> None:
        """
        delete the referenced resource, moving it to the recycle bin where supported
        """
        raise NotImplementedError()

    @abstractmethod
    def move(self, ctx: Context, old_ref: Reference, new_ref: Reference) -> None:
        raise NotImplementedError()

    @abstractmethod
    def get_md(self, ctx: Context, ref: Reference, md_keys: List[str]=None) -> ResourceInfo:
        """
        return the metadata for the referenced resource
        :param list md_keys:  the names of the arbitrary metadata properties to include
        :raises ResourceNotFound:  if the resource does not exist
        """
        raise NotImplementedError()

    @abstractmethod
    def list_folder(self, ctx: Context, ref: Reference, md_keys: List[str]=None) -> List[ResourceInfo]:
        """
        return the metadata for each of the members of the referenced container
        :raises ResourceNotFound:  if the container does not exist
        """
        raise NotImplementedError()

    @abstractmethod
    def initiate_upload(self, ctx: Context, ref: Reference, upload_length: int,
                        metadata: Mapping=None) -> Mapping:
        """
        prepare for an upload of a file, returning a mapping of upload protocol names to
        upload identifiers or URLs
        """
        raise NotImplementedError()

    @abstractmethod
    def upload(self, ctx: Context, ref: Reference, stream: BinaryIO) -> None:
        raise NotImplementedError()

    @abstractmethod
    def download(self, ctx: Context, ref: Reference) -> BinaryIO:
        """
        return a readable byte stream delivering the contents of the referenced file.  The
        caller is responsible for closing the stream.
        """
        raise NotImplementedError()

    @abstractmethod
    def list_revisions(self, ctx: Context, ref: Reference) -> List[FileVersion]:
        raise NotImplementedError()

    @abstractmethod
    def download_revision(self, ctx: Context, ref: Reference, key: str) -> BinaryIO:
        raise NotImplementedError()

    @abstractmethod
    def restore_revision(self, ctx: Context, ref: Reference, key: str) -> None:
        raise NotImplementedError()

    @abstractmethod
    def list_recycle(self, ctx: Context, key: str, path: str) -> List[RecycleItem]:
        raise NotImplementedError()

    @abstractmethod
    def restore_recycle_item(self, ctx: Context, key: str, path: str,
                             restore_ref: Reference=None) -> None:
        raise NotImplementedError()

    @abstractmethod
    def purge_recycle_item(self, ctx: Context, key: str, path: str) -> None:
        raise NotImplementedError()

    @abstractmethod
    def empty_recycle(self, ctx: Context) -> None:
        raise NotImplementedError()

    @abstractmethod
    def get_path_by_id(self, ctx: Context, id: ResourceId) -> str:
        raise NotImplementedError()

    @abstractmethod
    def add_grant(self, ctx: Context, ref: Reference, g: Grant) -> None:
        raise NotImplementedError()

    @abstractmethod
    def remove_grant(self, ctx: Context, ref: Reference, g: Grant) -> None:
        raise NotImplementedError()

    @abstractmethod
    def deny_grant(self, ctx: Context, ref: Reference, g: Grantee) -> None:
        raise NotImplementedError()

    @abstractmethod
    def update_grant(self, ctx: Context, ref: Reference, g: Grant) -> None:
        raise NotImplementedError()

    @abstractmethod
    def list_grants(self, ctx: Context, ref: Reference) -> List[Grant]:
        raise NotImplementedError()

    @abstractmethod
    def get_quota(self, ctx: Context) -> Tuple[int, int]:
        """
        return the user's storage quota as a tuple of total and used bytes
        """
        raise NotImplementedError()

    @abstractmethod
    def create_reference(self, ctx: Context, path: str, target_uri: str) -> None:
        raise NotImplementedError()

    @abstractmethod
    def shutdown(self, ctx: Context) -> None:
        raise NotImplementedError()

    @abstractmethod
    def set_arbitrary_metadata(self, ctx: Context, ref: Reference, md: ArbitraryMetadata) -> None:
        raise NotImplementedError()

    @abstractmethod
    def unset_arbitrary_metadata(self, ctx: Context, ref: Reference, keys: List[str]) -> None:
        raise NotImplementedError()

    @abstractmethod
    def list_storage_spaces(self, ctx: Context,
                            filters: List[ListStorageSpacesFilter]=None) -> List[StorageSpace]:
        raise NotImplementedError()

    @abstractmethod
    def create_storage_space(self, ctx: Context, req: CreateStorageSpaceRequest) -> StorageSpace:
        raise NotImplementedError()
