"""
an in-memory simulation of the Nextcloud ScienceMesh app API, used by the Nextcloud storage
driver when it is configured with ``mock_http`` set to True.

:py:class:`NextcloudServerMock` stands in for the ``requests.Session`` that the driver sends its
requests through:  its :py:meth:`~NextcloudServerMock.request` method interprets the request
URL and body and returns a genuine ``requests.Response``.  Each user (as selected by the ``~user``
part of the URL) gets an independent space with a file tree, file revisions, a recycle bin,
grants, and arbitrary metadata.  Each request is recorded in :py:attr:`~NextcloudServerMock.called`.
"""
import io, json, time, hashlib, logging, mimetypes, posixpath
from collections import OrderedDict
from http import HTTPStatus
from urllib.parse import unquote, unquote_plus, quote_plus

import requests
from requests.structures import CaseInsensitiveDict

from sciencemesh.cs3.provider import PERMISSION_NAMES

DIRECTORY_MIMETYPE = "httpd/unix-directory"
DEF_QUOTA = 10 * 1024**3

class _MockError(Exception):
    def __init__(self, code, message):
        super(_MockError, self).__init__(message)
        self.code = code

class _Node(object):
    def __init__(self, isdir, content=b"", mtime=None):
        self.isdir = isdir
        self.content = content
        self.mtime = int(mtime if mtime is not None else time.time())
        self.metadata = OrderedDict()
        self.revisions = []
        self.nrevs = 0

    @property
    def size(self):
        return 0 if self.isdir else len(self.content)

    @property
    def etag(self):
        if self.isdir:
            return hashlib.md5(str(self.mtime).encode()).hexdigest()
        return hashlib.md5(self.content).hexdigest()

class _UserSpace(object):
    """
    the simulated storage for one user
    """
    def __init__(self, username, quota=DEF_QUOTA):
        self.username = username
        self.quota = quota
        self.nodes = OrderedDict([("/", _Node(True))])
        self.recycle = OrderedDict()
        self.grants = {}
        self.references = {}

    def used(self):
        return sum(n.size for n in self.nodes.values())

    def get(self, path):
        node = self.nodes.get(path)
        if node is None:
            raise _MockError(404, f"{path}: not found")
        return node

    def subtree(self, path):
        prefix = path.rstrip('/') + '/'
        return [p for p in self.nodes if p == path or p.startswith(prefix)]

    def children(self, path):
        prefix = path.rstrip('/') + '/'
        return [p for p in self.nodes
                if p.startswith(prefix) and p != path and '/' not in p[len(prefix):]]

    def ensure_parent(self, path):
        parent = posixpath.dirname(path)
        if parent not in self.nodes or not self.nodes[parent].isdir:
            raise _MockError(404, f"{parent}: parent folder not found")

class NextcloudServerMock(object):
    """
    a session-like object that simulates the Nextcloud ScienceMesh app API in memory.

    :param str  end_point:  the base URL that requests are expected to be sent to (everything
                            preceding ``~username/api/``)
    :param Logger     log:  a Logger to record requests to
    :param int      quota:  the total quota (in bytes) to report for each user
    """

    def __init__(self, end_point: str, log: logging.Logger=None, quota: int=DEF_QUOTA):
        if not end_point.endswith('/'):
            end_point += '/'
        self.end_point = end_point
        self.quota = quota
        if not log:
            log = logging.getLogger("nextcloud.mock")
        self.log = log
        self.called = []
        self.spaces = {}

    def space_for(self, username) -> _UserSpace:
        """
        return the simulated storage for the given user, creating it if necessary
        """
        if username not in self.spaces:
            self.spaces[username] = _UserSpace(username, self.quota)
        return self.spaces[username]

    def request(self, method, url, data=None, headers=None, **kwargs) -> requests.Response:
        """
        handle a request as the Nextcloud service would
        """
        body = data
        if hasattr(body, "read"):
            body = body.read()
        if body is None:
            body = b""
        elif isinstance(body, str):
            body = body.encode('utf-8')
        self.called.append("%s %s %s" % (method, url, body.decode('utf-8', errors='replace')))

        try:
            if not url.startswith(self.end_point + '~'):
                raise _MockError(404, f"{url}: unrecognized endpoint")
            username, sep, resource = url[len(self.end_point)+1:].partition('/api/')
            if not username or not sep:
                raise _MockError(404, f"{url}: unrecognized endpoint")
            space = self.space_for(unquote(username))

            verb, _, arg = resource.partition('/')
            if method == "PUT" and verb == "Upload":
                return self._response(url, self._upload(space, _norm(unquote(arg)), body))
            if method == "GET" and verb == "Download":
                return self._response(url, 200, self._download(space, _norm(unquote(arg))),
                                      "application/octet-stream")
            if method == "GET" and verb == "DownloadRevision":
                key, _, path = arg.partition('/')
                return self._response(url, 200,
                                      self._download_revision(space, _norm(unquote(path)),
                                                              unquote_plus(key)),
                                      "application/octet-stream")
            if method != "POST" or arg:
                raise _MockError(405, f"{method} {resource}: method not allowed")

            handler = getattr(self, "_do_" + verb, None)
            if not handler:
                raise _MockError(400, f"{verb}: unrecognized action")
            params = None
            if body.strip():
                try:
                    params = json.loads(body)
                except ValueError as ex:
                    raise _MockError(400, f"{verb}: bad JSON input: {str(ex)}")

            code, out = handler(space, params)
            if out is None:
                out = b""
            elif isinstance(out, str):
                return self._response(url, code, out, "text/plain")
            else:
                out = json.dumps(out)
            return self._response(url, code, out)

        except _MockError as ex:
            self.log.debug("mock error response (%d): %s", ex.code, str(ex))
            return self._response(url, ex.code, json.dumps({"error": str(ex)}))

    def _response(self, url, code, body=b"", ctype="application/json") -> requests.Response:
        if isinstance(body, str):
            body = body.encode('utf-8')
        resp = requests.Response()
        resp.status_code = code
        resp.reason = HTTPStatus(code).phrase
        resp.url = url
        resp.encoding = 'utf-8'
        resp.headers = CaseInsensitiveDict({"Content-Type": ctype, "Content-Length": str(len(body))})
        resp.raw = io.BytesIO(body)
        resp._content = body
        return resp

    # file content transfers

    def _upload(self, space, path, content):
        if path in space.nodes and space.nodes[path].isdir:
            raise _MockError(409, f"{path}: is a folder")
        space.ensure_parent(path)
        node = space.nodes.get(path)
        if node is None:
            space.nodes[path] = _Node(False, content)
            return 201
        node.nrevs += 1
        key = "%d.%s.%d" % (node.mtime, node.etag[:8], node.nrevs)
        node.revisions.append(OrderedDict([("key", key),
                                           ("content", node.content), ("mtime", node.mtime),
                                           ("etag", node.etag)]))
        node.content = content
        node.mtime = int(time.time())
        return 200

    def _download(self, space, path):
        node = space.get(path)
        if node.isdir:
            raise _MockError(400, f"{path}: is a folder")
        return node.content

    def _download_revision(self, space, path, key):
        return self._find_revision(space.get(path), path, key)['content']

    def _find_revision(self, node, path, key):
        for rev in node.revisions:
            if rev['key'] == key:
                return rev
        raise _MockError(404, f"{path}: revision not found: {key}")

    # JSON actions

    def _do_GetHome(self, space, params):
        return 200, "/"

    def _do_CreateHome(self, space, params):
        return 201, None

    def _do_CreateDir(self, space, params):
        path = _ref_path(params)
        if path in space.nodes:
            raise _MockError(409, f"{path}: already exists")
        space.ensure_parent(path)
        space.nodes[path] = _Node(True)
        return 201, None

    def _do_Delete(self, space, params):
        path = _ref_path(params)
        if path == "/":
            raise _MockError(400, "cannot delete home folder")
        space.get(path)
        now = int(time.time())
        key = "%s.d%d" % (posixpath.basename(path), now)
        n = 1
        while key in space.recycle:
            n += 1
            key = "%s.d%d-%d" % (posixpath.basename(path), now, n)
        paths = space.subtree(path)
        space.recycle[key] = OrderedDict([
            ("path", path), ("deletionTime", now),
            ("nodes", OrderedDict((p, space.nodes.pop(p)) for p in paths))
        ])
        return 200, None

    def _do_Move(self, space, params):
        if not isinstance(params, dict):
            raise _MockError(400, "Move: missing from and to references")
        src = _ref_path(params.get("from"))
        dest = _ref_path(params.get("to"))
        space.get(src)
        if dest == src or dest.startswith(src.rstrip('/') + '/'):
            raise _MockError(400, f"{src}: cannot move into itself ({dest})")
        if dest in space.nodes:
            raise _MockError(409, f"{dest}: already exists")
        space.ensure_parent(dest)
        for p in space.subtree(src):
            space.nodes[dest + p[len(src):]] = space.nodes.pop(p)
        return 200, None

    def _describe(self, space, path, mdkeys=None):
        node = space.get(path)
        md = node.metadata
        if mdkeys and "*" not in mdkeys:
            md = OrderedDict((k, v) for k, v in md.items() if k in mdkeys)
        mimetype = DIRECTORY_MIMETYPE
        if not node.isdir:
            mimetype = mimetypes.guess_type(path)[0] or "application/octet-stream"
        return OrderedDict([("path", path), ("size", node.size), ("etag", node.etag),
                            ("mimetype", mimetype), ("mtime", node.mtime), ("metadata", md)])

    def _do_GetMD(self, space, params):
        params = params or {}
        return 200, self._describe(space, _ref_path(params.get("ref")), params.get("mdKeys"))

    def _do_ListFolder(self, space, params):
        params = params or {}
        path = _ref_path(params.get("ref"))
        if not space.get(path).isdir:
            raise _MockError(400, f"{path}: not a folder")
        return 200, [self._describe(space, p, params.get("mdKeys")) for p in space.children(path)]

    def _do_InitiateUpload(self, space, params):
        path = _ref_path((params or {}).get("ref"))
        space.ensure_parent(path)
        return 200, OrderedDict([("simple", "/~%s/api/Upload%s" % (space.username, path))])

    def _do_ListRevisions(self, space, params):
        path = _ref_path(params)
        return 200, [OrderedDict([("key", r['key']), ("size", len(r['content'])),
                                  ("mtime", r['mtime']), ("etag", r['etag'])])
                     for r in space.get(path).revisions]

    def _do_RestoreRevision(self, space, params):
        params = params or {}
        path = _norm(params.get("path"))
        node = space.get(path)
        rev = self._find_revision(node, path, params.get("key"))
        node.revisions.remove(rev)
        self._upload(space, path, rev['content'])
        return 200, None

    def _do_ListRecycle(self, space, params):
        out = []
        for key, item in space.recycle.items():
            out.append(OrderedDict([("key", key), ("path", item['path']),
                                    ("size", sum(n.size for n in item['nodes'].values())),
                                    ("deletionTime", item['deletionTime'])]))
        return 200, out

    def _do_RestoreRecycleItem(self, space, params):
        params = params or {}
        key = params.get("key")
        if key not in space.recycle:
            raise _MockError(404, f"{key}: recycle item not found")
        item = space.recycle[key]
        dest = item['path']
        if params.get("restoreRef") and params["restoreRef"].get("path"):
            dest = _norm(params["restoreRef"]["path"])
        if dest in space.nodes:
            raise _MockError(409, f"{dest}: already exists")
        space.ensure_parent(dest)
        for p, node in item['nodes'].items():
            space.nodes[dest + p[len(item['path']):]] = node
        del space.recycle[key]
        return 200, None

    def _do_PurgeRecycleItem(self, space, params):
        key = (params or {}).get("key")
        if key not in space.recycle:
            raise _MockError(404, f"{key}: recycle item not found")
        del space.recycle[key]
        return 200, None

    def _do_EmptyRecycle(self, space, params):
        space.recycle.clear()
        return 200, None

    def _do_GetPathByID(self, space, params):
        oid = (params or {}).get("opaque_id", "")
        if not oid.startswith("fileid-"):
            raise _MockError(404, f"{oid}: unrecognized id")
        path = unquote_plus(oid[len("fileid-"):])
        space.get(path)
        return 200, path

    def _grantee_key(self, grantee):
        try:
            uid = grantee["Id"]["UserId"]
            return (uid.get("idp", ""), uid["opaque_id"])
        except (KeyError, TypeError):
            raise _MockError(400, "grant is missing grantee user id")

    def _set_grant(self, space, params, must_exist=None):
        params = params or {}
        path = _ref_path(params.get("reference"))
        space.get(path)
        grant = params.get("grant") or {}
        key = self._grantee_key(grant.get("grantee"))
        grants = space.grants.setdefault(path, OrderedDict())
        if must_exist is True and key not in grants:
            raise _MockError(404, f"{path}: no grant for {key[1]}")
        if must_exist is False and key in grants:
            raise _MockError(409, f"{path}: grant already exists for {key[1]}")
        perms = grant.get("permissions") or {}
        grants[key] = OrderedDict((p, bool(perms.get(p, False))) for p in PERMISSION_NAMES)
        return path, key

    def _do_AddGrant(self, space, params):
        self._set_grant(space, params, must_exist=False)
        return 201, None

    def _do_UpdateGrant(self, space, params):
        self._set_grant(space, params, must_exist=True)
        return 200, None

    def _do_RemoveGrant(self, space, params):
        params = params or {}
        path = _ref_path(params.get("reference"))
        key = self._grantee_key((params.get("grant") or {}).get("grantee"))
        grants = space.grants.get(path, {})
        if key not in grants:
            raise _MockError(404, f"{path}: no grant for {key[1]}")
        del grants[key]
        return 200, None

    def _do_DenyGrant(self, space, params):
        params = params or {}
        path = _ref_path(params.get("reference"))
        space.get(path)
        key = self._grantee_key(params.get("grantee"))
        space.grants.setdefault(path, OrderedDict())[key] = \
            OrderedDict((p, False) for p in PERMISSION_NAMES)
        return 200, None

    def _do_ListGrants(self, space, params):
        path = _ref_path(params)
        space.get(path)
        out = []
        for (idp, oid), perms in space.grants.get(path, {}).items():
            out.append(OrderedDict([
                ("grantee", {"type": 1, "Id": {"UserId": {"idp": idp, "opaque_id": oid, "type": 1}}}),
                ("permissions", perms)
            ]))
        return 200, out

    def _do_GetQuota(self, space, params):
        return 200, OrderedDict([("total", space.quota), ("used", space.used())])

    def _do_CreateReference(self, space, params):
        path = _norm((params or {}).get("path"))
        space.references[path] = True
        return 201, None

    def _do_Shutdown(self, space, params):
        return 200, None

    def _do_SetArbitraryMetadata(self, space, params):
        params = params or {}
        node = space.get(_ref_path(params.get("ref")))
        md = (params.get("md") or {}).get("metadata") or {}
        node.metadata.update((k, str(v)) for k, v in md.items())
        return 200, None

    def _do_UnsetArbitraryMetadata(self, space, params):
        params = params or {}
        node = space.get(_ref_path(params.get("ref")))
        for k in params.get("keys") or []:
            node.metadata.pop(k, None)
        return 200, None

    def _do_ListStorageSpaces(self, space, params):
        return 200, [OrderedDict([
            ("id", {"opaque_id": space.username}),
            ("owner", {"username": space.username,
                       "id": {"idp": "nextcloud", "opaque_id": space.username, "type": 1}}),
            ("root", {"opaque_id": "fileid-" + quote_plus("/")}),
            ("name", space.username),
            ("quota", {"quota_max_bytes": space.quota}),
            ("space_type", "personal")
        ])]


def _norm(path):
    if not path:
        return "/"
    return posixpath.normpath('/' + path.strip('/'))

def _ref_path(ref):
    if not isinstance(ref, dict):
        raise _MockError(400, "missing resource reference")
    return _norm(ref.get("path"))
