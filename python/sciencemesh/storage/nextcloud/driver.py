"""
This module provides the storage driver class, :py:class:`NextcloudStorageDriver`, which implements
the CS3 storage interface by forwarding each operation to a Nextcloud instance running the
ScienceMesh app.  Each operation is translated into a single HTTP request against the app's API
for the requesting user:

    POST {end_point}~{username}/api/{Verb}

with the operation's parameters encoded as a JSON body; file content is transferred via PUT and
GET requests to the ``Upload``, ``Download``, and ``DownloadRevision`` endpoints.  The JSON (or
raw byte) responses are converted back into CS3 message types.
"""
import os, json, logging
from collections import OrderedDict
from collections.abc import Mapping
from typing import List, Tuple, BinaryIO
from urllib.parse import quote, quote_plus

import requests
import OpenSSL

from sciencemesh.base.config import ConfigurationException
from sciencemesh.cs3.identity import UserId, UserType
from sciencemesh.cs3.provider import (Reference, ResourceId, ResourceInfo, ResourceType, ResourceChecksum,
                                      ResourcePermissions, Timestamp, ArbitraryMetadata, Grant, Grantee,
                                      GranteeType, FileVersion, RecycleItem, StorageSpace,
                                      ListStorageSpacesFilter, CreateStorageSpaceRequest)
from ..base import FS
from ..ctx import Context, get_user, get_logger
from ..exceptions import *

DIRECTORY_MIMETYPE = "httpd/unix-directory"
DEF_UPLOAD_CONTENT_TYPE = "text/plain"

_config_types = {
    "end_point":        str,
    "mock_http":        bool,
    "authentication":   Mapping,
    "ca_bundle":        str,
    "site_cert_verify": bool,
    "timeout":          (int, float)
}

def parse_config(config: Mapping) -> Mapping:
    """
    check and normalize the driver configuration, returning a new dictionary.  Unrecognized
    parameters are ignored.
    :raises ConfigurationException:  if a required parameter is missing or a parameter has a value
                                     of the wrong type
    """
    if not isinstance(config, Mapping):
        raise ConfigurationException("nextcloud: error decoding conf: not a dictionary")

    out = OrderedDict([("mock_http", False), ("site_cert_verify", True)])
    for key, typ in _config_types.items():
        if config.get(key) is None:
            continue
        val = config[key]
        if not isinstance(val, typ) or (typ is not bool and isinstance(val, bool)):
            raise ConfigurationException("nextcloud: error decoding conf: %s: wrong type (%s)" %
                                         (key, type(val).__name__))
        out[key] = val

    if not out.get("end_point"):
        raise ConfigurationException("nextcloud: Missing required config parameter: end_point")
    if not out["end_point"].endswith('/'):
        out["end_point"] += '/'
    return out

def extract_cert_cn(cert_path: str):
    """ Extract CN (Common Name) from the given X.509 certificate (in PEM format) """
    with open(cert_path, 'rb') as cert_file:
        cert_data = cert_file.read()

    cert = OpenSSL.crypto.load_certificate(OpenSSL.crypto.FILETYPE_PEM, cert_data)
    return cert.get_subject().CN


class NextcloudStorageDriver(FS):
    """
    a storage driver that talks to a Nextcloud instance over HTTP.

    This class supports the following configuration parameters:

    ``end_point``
        (str) _required_.  the base URL of the ScienceMesh app on the Nextcloud instance
        (e.g. "https://nc.example.org/apps/sciencemesh/").
    ``mock_http``
        (bool) _optional_.  if True, requests are not sent over the network but rather to an
        in-memory simulation of the Nextcloud service (see
        :py:class:`~sciencemesh.storage.nextcloud.mock.NextcloudServerMock`).  Default: False.
    ``authentication``
        (dict) _optional_.  the credentials for connecting to the service (see below).  If not
        provided, it will be assumed that authentication is not required.
    ``ca_bundle``
        (str) _optional_.  the path to a CA certificate bundle that should be used to validate the
        remote server's site certificate.  If not provided, the CAs installed into the OS will be used.
    ``site_cert_verify``
        (bool) _optional_.  if False, the remote server's site certificate will not be verified.
    ``timeout``
        (float) _optional_.  the number of seconds to wait for the service to respond.

    The ``authentication`` object supports either ``user`` and ``pass`` (for HTTP basic
    authentication) or ``client_cert_path`` and ``client_key_path`` (for X.509 client certificate
    authentication).  If ``user`` is given with a client certificate, it must match the
    certificate's common name (CN).
    """

    def __init__(self, config: Mapping, log: logging.Logger=None):
        """
        initialize the driver

        :param dict config:  the configuration parameters for this driver; see class documentation for
                             the parameter descriptions.
        :param Logger log:   the Logger object to use for messages from this driver.  If not provided,
                             a default logger with the name "nextcloud" will be used.
        """
        if not log:
            log = logging.getLogger("nextcloud")
        self.log = log

        self.cfg = parse_config(config)
        self.end_point = self.cfg['end_point']

        self._reqkw = self._prep_auth(self.cfg.get("authentication"))
        if not self.cfg['site_cert_verify']:
            self._reqkw['verify'] = False
        elif self.cfg.get("ca_bundle"):
            self._reqkw['verify'] = self.cfg['ca_bundle']
        if self.cfg.get("timeout"):
            self._reqkw['timeout'] = self.cfg['timeout']

        if self.cfg['mock_http']:
            from .mock import NextcloudServerMock
            self.client = NextcloudServerMock(self.end_point, log=self.log.getChild("mock"))
        else:
            self.client = requests.Session()

    def _prep_auth(self, authcfg):
        out = {}
        if not authcfg:
            return out

        if authcfg.get("client_cert_path"):
            if not os.path.isfile(authcfg["client_cert_path"]):
                raise ConfigurationException(f"{authcfg['client_cert_path']}: client cert file not found")
            if not authcfg.get("client_key_path"):
                raise ConfigurationException("nextcloud: missing required config parameter: "
                                             "authentication.client_key_path")
            if not os.path.isfile(authcfg["client_key_path"]):
                raise ConfigurationException(f"{authcfg['client_key_path']}: client key file not found")
            out['cert'] = (authcfg["client_cert_path"], authcfg["client_key_path"])

            if authcfg.get("user"):
                try:
                    certuser = extract_cert_cn(authcfg['client_cert_path'])
                except Exception as ex:
                    raise ConfigurationException("%s: trouble reading client cert: %s" %
                                                 (authcfg['client_cert_path'], str(ex))) from ex

                if authcfg['user'] != certuser:
                    raise ConfigurationException("%s: CN does not match %s" %
                                                 (authcfg['client_cert_path'], authcfg['user']))

        elif authcfg.get("user"):
            if not authcfg.get("pass"):
                raise ConfigurationException("nextcloud: missing required config parameter: "
                                             "authentication.pass")
            out['auth'] = (authcfg['user'], authcfg['pass'])

        return out

    def set_http_client(self, client):
        """
        replace the HTTP client used to send requests.  The client must support the
        ``request()`` method of a ``requests.Session``.
        """
        self.client = client

    def _user_url(self, ctx: Context, resource: str) -> str:
        user = get_user(ctx)
        return f"{self.end_point}~{user.username}/api/{resource}"

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        kw = dict(self._reqkw)
        kw.update(kwargs)
        try:
            return self.client.request(method, url, **kw)
        except requests.RequestException as ex:
            raise StorageCommError(f"Failed to connect to storage service: {str(ex)}", url,
                                   cause=ex) from ex

    def _check_status(self, response: requests.Response, url: str) -> None:
        code = response.status_code
        if 200 <= code < 300:
            return

        err_msg = None
        if code >= 400 and response.text:
            try:
                err = response.json()
                if isinstance(err, Mapping):
                    err_msg = err.get('error') or err.get('message')
            except ValueError:
                pass

        if code >= 500:
            if err_msg:
                err_msg = "Storage Server Error: "+err_msg
            raise StorageServerError(code, url, response.text, err_msg)
        elif code == 404:
            raise ResourceNotFound(url, resptext=response.text)
        elif code in (401, 403):
            raise StorageUserUnauthorized(url, err_msg, response.text, code)
        elif code >= 400:
            raise StorageClientError(err_msg, code, url, response.text)
        else:
            raise UnexpectedStorageResponse("Unexpected response (%d): %s" %
                                            (code, err_msg or response.reason), url, response.text, code)

    def _do(self, ctx: Context, verb: str, body: str="") -> Tuple[int, bytes]:
        """
        send a JSON request for an action to the service and return the response status and body
        """
        log = get_logger(ctx, self.log)
        url = self._user_url(ctx, verb)
        log.info("nc.do %s", url)

        resp = self._send("POST", url, data=body, headers={"Content-Type": "application/json"})
        log.debug("nc.do response %d %s", resp.status_code, resp.text)
        self._check_status(resp, url)
        return resp.status_code, resp.content

    def _do_json(self, ctx: Context, verb: str, body: str=""):
        status, content = self._do(ctx, verb, body)
        try:
            return json.loads(content)
        except ValueError as ex:
            raise UnexpectedStorageResponse("%s: response could not be decoded as JSON: %s" %
                                            (verb, str(ex)), verb, _text(content), status) from ex

    def _log_action(self, ctx: Context, verb: str, params=None) -> str:
        """
        encode the parameters of an action as JSON, log the action, and return the JSON body
        """
        body = _encode(params) if params is not None else ""
        get_logger(ctx, self.log).info("%s %s", verb, body)
        return body

    def get_home(self, ctx: Context) -> str:
        self._log_action(ctx, "GetHome")
        status, content = self._do(ctx, "GetHome")
        return _text(content)

    def create_home(self, ctx: Context) -> None:
        self._log_action(ctx, "CreateHome")
        self._do(ctx, "CreateHome")

    def create_dir(self, ctx: Context, ref: Reference) -> None:
        body = self._log_action(ctx, "CreateDir", ref)
        self._do(ctx, "CreateDir", body)

    def delete(self, ctx: Context, ref: Reference) -> None:
        body = self._log_action(ctx, "Delete", ref)
        self._do(ctx, "Delete", body)

    def move(self, ctx: Context, old_ref: Reference, new_ref: Reference) -> None:
        body = self._log_action(ctx, "Move", OrderedDict([("from", old_ref), ("to", new_ref)]))
        self._do(ctx, "Move", body)

    def get_md(self, ctx: Context, ref: Reference, md_keys: List[str]=None) -> ResourceInfo:
        body = self._log_action(ctx, "GetMD", OrderedDict([("ref", ref), ("mdKeys", md_keys)]))
        data = self._do_json(ctx, "GetMD", body)
        return _to_resource_info(data, "GetMD", ref.path)

    def list_folder(self, ctx: Context, ref: Reference, md_keys: List[str]=None) -> List[ResourceInfo]:
        body = self._log_action(ctx, "ListFolder", OrderedDict([("ref", ref), ("mdKeys", md_keys)]))
        data = self._do_json(ctx, "ListFolder", body)
        return [_to_resource_info(item, "ListFolder") for item in _as_list(data, "ListFolder")]

    def initiate_upload(self, ctx: Context, ref: Reference, upload_length: int,
                        metadata: Mapping=None) -> Mapping:
        body = self._log_action(ctx, "InitiateUpload",
                                OrderedDict([("ref", ref), ("uploadLength", upload_length),
                                             ("metadata", metadata)]))
        data = self._do_json(ctx, "InitiateUpload", body)
        if not isinstance(data, Mapping) or not all(isinstance(v, str) for v in data.values()):
            raise UnexpectedStorageResponse("InitiateUpload: expected an object with string values",
                                            "InitiateUpload", json.dumps(data))
        return dict(data)

    def upload(self, ctx: Context, ref: Reference, stream: BinaryIO, content_type: str=None) -> None:
        """
        upload the contents of a file.
        :param Reference      ref:  the reference to the file to write
        :param stream      stream:  a readable stream (or bytes) providing the file contents
        :param str   content_type:  the MIME type of the contents (default: "text/plain")
        """
        self._log_action(ctx, "Upload", ref)
        url = self._user_url(ctx, "Upload/" + _quote_path(ref.path))
        resp = self._send("PUT", url, data=stream,
                          headers={"Content-Type": content_type or DEF_UPLOAD_CONTENT_TYPE})
        self._check_status(resp, url)

    def _download(self, ctx: Context, url: str) -> BinaryIO:
        resp = self._send("GET", url, stream=True)
        try:
            self._check_status(resp, url)
            if resp.status_code != 200:
                raise UnexpectedStorageResponse("No 200 response code in download request (%d)" %
                                                resp.status_code, url, code=resp.status_code)
        except StorageServiceError:
            resp.close()
            raise

        # undo any Content-Encoding (e.g. gzip) applied by the server
        resp.raw.decode_content = True
        return resp.raw

    def download(self, ctx: Context, ref: Reference) -> BinaryIO:
        get_logger(ctx, self.log).info("Download %s", ref.path)
        return self._download(ctx, self._user_url(ctx, "Download/" + _quote_path(ref.path)))

    def list_revisions(self, ctx: Context, ref: Reference) -> List[FileVersion]:
        body = self._log_action(ctx, "ListRevisions", ref)
        data = self._do_json(ctx, "ListRevisions", body)
        try:
            return [FileVersion(key=item["key"], size=int(item["size"]), mtime=int(item["mtime"]),
                                etag=item["etag"])
                    for item in _as_list(data, "ListRevisions")]
        except (KeyError, TypeError, ValueError) as ex:
            raise UnexpectedStorageResponse("ListRevisions: unexpected revision description: " +
                                            str(ex), "ListRevisions", json.dumps(data)) from ex

    def download_revision(self, ctx: Context, ref: Reference, key: str) -> BinaryIO:
        get_logger(ctx, self.log).info("DownloadRevision %s %s", ref.path, key)
        url = self._user_url(ctx, "DownloadRevision/%s/%s" % (quote_plus(key), _quote_path(ref.path)))
        return self._download(ctx, url)

    def restore_revision(self, ctx: Context, ref: Reference, key: str) -> None:
        body = self._log_action(ctx, "RestoreRevision", OrderedDict([("path", ref.path), ("key", key)]))
        self._do(ctx, "RestoreRevision", body)

    def list_recycle(self, ctx: Context, key: str, path: str) -> List[RecycleItem]:
        body = self._log_action(ctx, "ListRecycle", OrderedDict([("path", path), ("key", key)]))
        data = self._do_json(ctx, "ListRecycle", body)
        try:
            return [RecycleItem(key=item["key"], ref=Reference(resource_id=ResourceId(), path=path),
                                size=int(item["size"]),
                                deletion_time=Timestamp(seconds=int(item["deletionTime"])))
                    for item in _as_list(data, "ListRecycle")]
        except (KeyError, TypeError, ValueError) as ex:
            raise UnexpectedStorageResponse("ListRecycle: unexpected recycle item description: " +
                                            str(ex), "ListRecycle", json.dumps(data)) from ex

    def restore_recycle_item(self, ctx: Context, key: str, path: str,
                             restore_ref: Reference=None) -> None:
        if restore_ref is None:
            restore_ref = Reference()
        body = self._log_action(ctx, "RestoreRecycleItem",
                                OrderedDict([("key", key), ("path", path), ("restoreRef", restore_ref)]))
        self._do(ctx, "RestoreRecycleItem", body)

    def purge_recycle_item(self, ctx: Context, key: str, path: str) -> None:
        body = self._log_action(ctx, "PurgeRecycleItem", OrderedDict([("key", key), ("path", path)]))
        self._do(ctx, "PurgeRecycleItem", body)

    def empty_recycle(self, ctx: Context) -> None:
        self._log_action(ctx, "EmptyRecycle")
        self._do(ctx, "EmptyRecycle")

    def get_path_by_id(self, ctx: Context, id: ResourceId) -> str:
        body = self._log_action(ctx, "GetPathByID", id)
        status, content = self._do(ctx, "GetPathByID", body)
        return _text(content)

    def _grant_action(self, ctx: Context, verb: str, ref: Reference, g: Grant) -> None:
        body = self._log_action(ctx, verb, OrderedDict([("reference", ref), ("grant", g)]))
        self._do(ctx, verb, body)

    def add_grant(self, ctx: Context, ref: Reference, g: Grant) -> None:
        self._grant_action(ctx, "AddGrant", ref, g)

    def remove_grant(self, ctx: Context, ref: Reference, g: Grant) -> None:
        self._grant_action(ctx, "RemoveGrant", ref, g)

    def update_grant(self, ctx: Context, ref: Reference, g: Grant) -> None:
        self._grant_action(ctx, "UpdateGrant", ref, g)

    def deny_grant(self, ctx: Context, ref: Reference, g: Grantee) -> None:
        body = self._log_action(ctx, "DenyGrant", OrderedDict([("reference", ref), ("grantee", g)]))
        self._do(ctx, "DenyGrant", body)

    def list_grants(self, ctx: Context, ref: Reference) -> List[Grant]:
        body = self._log_action(ctx, "ListGrants", ref)
        data = self._do_json(ctx, "ListGrants", body)
        return [_to_grant(item) for item in _as_list(data, "ListGrants")]

    def get_quota(self, ctx: Context) -> Tuple[int, int]:
        self._log_action(ctx, "GetQuota")
        data = self._do_json(ctx, "GetQuota")
        try:
            return int(data["total"]), int(data["used"])
        except (KeyError, TypeError, ValueError) as ex:
            raise UnexpectedStorageResponse("GetQuota: unexpected quota description: "+str(ex),
                                            "GetQuota", json.dumps(data)) from ex

    def create_reference(self, ctx: Context, path: str, target_uri: str) -> None:
        get_logger(ctx, self.log).info("CreateReference %s -> %s", path, target_uri)
        self._do(ctx, "CreateReference", _encode({"path": path}))

    def shutdown(self, ctx: Context) -> None:
        self._log_action(ctx, "Shutdown")
        self._do(ctx, "Shutdown")

    def set_arbitrary_metadata(self, ctx: Context, ref: Reference, md: ArbitraryMetadata) -> None:
        body = self._log_action(ctx, "SetArbitraryMetadata", OrderedDict([("ref", ref), ("md", md)]))
        self._do(ctx, "SetArbitraryMetadata", body)

    def unset_arbitrary_metadata(self, ctx: Context, ref: Reference, keys: List[str]) -> None:
        body = self._log_action(ctx, "UnsetArbitraryMetadata",
                                OrderedDict([("ref", ref), ("keys", keys)]))
        self._do(ctx, "UnsetArbitraryMetadata", body)

    def list_storage_spaces(self, ctx: Context,
                            filters: List[ListStorageSpacesFilter]=None) -> List[StorageSpace]:
        body = self._log_action(ctx, "ListStorageSpaces", list(filters or []))
        status, content = self._do(ctx, "ListStorageSpaces", body)
        if not content.strip():
            return []
        try:
            data = json.loads(content)
        except ValueError as ex:
            raise UnexpectedStorageResponse("ListStorageSpaces: response could not be decoded as JSON: " +
                                            str(ex), "ListStorageSpaces", _text(content), status) from ex
        try:
            return [StorageSpace.from_dict(item) for item in _as_list(data, "ListStorageSpaces")]
        except (TypeError, ValueError) as ex:
            raise UnexpectedStorageResponse("ListStorageSpaces: unexpected space description: " +
                                            str(ex), "ListStorageSpaces", _text(content)) from ex

    def create_storage_space(self, ctx: Context, req: CreateStorageSpaceRequest) -> StorageSpace:
        raise NotSupported("CreateStorageSpace")


def _encode(params) -> str:
    return json.dumps(params, default=_json_default)

def _json_default(obj):
    if hasattr(obj, 'to_dict'):
        return obj.to_dict()
    raise TypeError("Object of type %s is not JSON serializable" % type(obj).__name__)

def _text(content: bytes) -> str:
    if isinstance(content, bytes):
        return content.decode('utf-8', errors='replace')
    return content

def _quote_path(path: str) -> str:
    return quote((path or "").lstrip('/'))

def _as_list(data, verb: str) -> list:
    if data is None:
        return []
    if not isinstance(data, list):
        raise UnexpectedStorageResponse(f"{verb}: expected a JSON array in response", verb,
                                        json.dumps(data))
    return data

def _to_resource_info(data, verb: str, path: str=None) -> ResourceInfo:
    """
    convert a resource description returned by the service into a ResourceInfo
    :param str path:  the path to assign to the resource; if None, the path given in the
                      description will be used.
    """
    try:
        rpath = data["path"]
        md = data.get("metadata") or {}
        if not isinstance(md, Mapping) or not all(isinstance(v, str) for v in md.values()):
            raise ValueError("metadata is not an object with string values")
        mtime = None
        if data.get("mtime") is not None:
            mtime = Timestamp(seconds=int(data["mtime"]))
        perms = ResourcePermissions.from_dict(data.get("permissions")) or ResourcePermissions()

        return ResourceInfo(
            type=ResourceType.CONTAINER if data["mimetype"] == DIRECTORY_MIMETYPE else ResourceType.FILE,
            id=ResourceId(opaque_id="fileid-" + quote_plus(rpath)),
            checksum=ResourceChecksum(),
            etag=data["etag"],
            mime_type=data["mimetype"],
            mtime=mtime,
            path=path if path is not None else rpath,
            permission_set=perms,
            size=int(data.get("size") or 0),
            arbitrary_metadata=ArbitraryMetadata(metadata=OrderedDict(md)) if md else None
        )
    except (KeyError, TypeError, ValueError) as ex:
        raise UnexpectedStorageResponse("%s: unexpected resource description: %s" % (verb, str(ex)),
                                        verb, json.dumps(data)) from ex

def _to_grant(data) -> Grant:
    try:
        uid = data["grantee"]["Id"]["UserId"]
        if not isinstance(data["permissions"], Mapping):
            raise ValueError("permissions is not an object")
        return Grant(
            grantee=Grantee(type=GranteeType.USER,
                            user_id=UserId(idp=uid["idp"], opaque_id=uid["opaque_id"],
                                           type=UserType.PRIMARY)),
            permissions=ResourcePermissions.from_dict(data["permissions"])
        )
    except (KeyError, TypeError, ValueError) as ex:
        raise UnexpectedStorageResponse("ListGrants: unexpected grant description: "+str(ex),
                                        "ListGrants", json.dumps(data)) from ex
