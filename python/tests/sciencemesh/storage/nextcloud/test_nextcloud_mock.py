import io, os, logging, tempfile
import unittest as test

from sciencemesh.storage import new_fs, Context
from sciencemesh.storage.exceptions import *
from sciencemesh.storage.nextcloud.mock import NextcloudServerMock
from sciencemesh.cs3 import *

tmpdir = tempfile.TemporaryDirectory(prefix="_test_nextcloud_mock.")
EP = "http://localhost/apps/sciencemesh/"

loghdlr = None
rootlog = None
def setUpModule():
    global loghdlr
    global rootlog
    rootlog = logging.getLogger()
    loghdlr = logging.FileHandler(os.path.join(tmpdir.name, "test_nextcloud_mock.log"))
    loghdlr.setLevel(logging.DEBUG)
    rootlog.addHandler(loghdlr)

def tearDownModule():
    global loghdlr
    if loghdlr:
        if rootlog:
            rootlog.removeHandler(loghdlr)
        loghdlr.flush()
        loghdlr.close()
        loghdlr = None
    tmpdir.cleanup()

def user(name):
    return User(id=UserId(idp="localhost", opaque_id=name, type=UserType.PRIMARY), username=name)

class TestServerMock(test.TestCase):

    def setUp(self):
        self.srv = NextcloudServerMock(EP)

    def test_request(self):
        resp = self.srv.request("POST", EP+"~einstein/api/GetHome", data="")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.text, "/")
        self.assertEqual(self.srv.called, ["POST "+EP+"~einstein/api/GetHome "])

    def test_bad_requests(self):
        resp = self.srv.request("POST", EP+"~einstein/api/Goob", data="")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Goob", resp.json()['error'])

        resp = self.srv.request("POST", "http://elsewhere/~einstein/api/GetHome", data="")
        self.assertEqual(resp.status_code, 404)

        resp = self.srv.request("GET", EP+"~einstein/api/GetHome")
        self.assertEqual(resp.status_code, 405)

        resp = self.srv.request("POST", EP+"~einstein/api/GetMD", data="{goob")
        self.assertEqual(resp.status_code, 400)

    def test_users_separate(self):
        self.srv.request("PUT", EP+"~einstein/api/Upload/a.txt", data=b"hello")
        resp = self.srv.request("GET", EP+"~einstein/api/Download/a.txt")
        self.assertEqual(resp.content, b"hello")
        resp = self.srv.request("GET", EP+"~marie/api/Download/a.txt")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(sorted(self.srv.spaces.keys()), ["einstein", "marie"])

class TestDriverWithMock(test.TestCase):

    def setUp(self):
        self.fs = new_fs("nextcloud", {"end_point": EP, "mock_http": True},
                         logging.getLogger("nextcloud"))
        self.ctx = Context(user("einstein"))
        self.srv = self.fs.client

    def test_home(self):
        self.fs.create_home(self.ctx)
        self.assertEqual(self.fs.get_home(self.ctx), "/")
        info = self.fs.get_md(self.ctx, Reference(path="/"))
        self.assertTrue(info.is_container)
        self.assertEqual(self.fs.list_folder(self.ctx, Reference(path="/")), [])

    def test_dirs_and_files(self):
        self.fs.create_dir(self.ctx, Reference(path="/docs"))
        with self.assertRaises(StorageClientError) as cm:
            self.fs.create_dir(self.ctx, Reference(path="/docs"))
        self.assertEqual(cm.exception.code, 409)
        with self.assertRaises(ResourceNotFound):
            self.fs.create_dir(self.ctx, Reference(path="/nope/sub"))

        self.fs.upload(self.ctx, Reference(path="/docs/report.txt"), io.BytesIO(b"draft 1"))
        self.fs.upload(self.ctx, Reference(path="/docs/data.csv"), b"a,b\n1,2\n", "text/csv")

        info = self.fs.get_md(self.ctx, Reference(path="/docs/report.txt"))
        self.assertEqual(info.type, ResourceType.FILE)
        self.assertEqual(info.path, "/docs/report.txt")
        self.assertEqual(info.size, 7)
        self.assertEqual(info.mime_type, "text/plain")
        self.assertGreater(info.mtime.seconds, 0)
        self.assertEqual(info.id.opaque_id, "fileid-%2Fdocs%2Freport.txt")

        items = self.fs.list_folder(self.ctx, Reference(path="/docs"))
        self.assertEqual(sorted(i.path for i in items), ["/docs/data.csv", "/docs/report.txt"])
        items = self.fs.list_folder(self.ctx, Reference(path="/"))
        self.assertEqual([i.path for i in items], ["/docs"])
        self.assertTrue(items[0].is_container)

        self.assertEqual(self.fs.download(self.ctx, Reference(path="/docs/report.txt")).read(), b"draft 1")
        self.assertEqual(self.fs.get_path_by_id(self.ctx, info.id), "/docs/report.txt")

        with self.assertRaises(ResourceNotFound):
            self.fs.get_md(self.ctx, Reference(path="/docs/goob.txt"))
        with self.assertRaises(ResourceNotFound):
            self.fs.download(self.ctx, Reference(path="/docs/goob.txt"))

    def test_move(self):
        self.fs.create_dir(self.ctx, Reference(path="/a"))
        self.fs.upload(self.ctx, Reference(path="/a/f.txt"), b"x")
        self.fs.move(self.ctx, Reference(path="/a"), Reference(path="/b"))
        self.assertEqual([i.path for i in self.fs.list_folder(self.ctx, Reference(path="/b"))], ["/b/f.txt"])
        with self.assertRaises(ResourceNotFound):
            self.fs.get_md(self.ctx, Reference(path="/a/f.txt"))
        with self.assertRaises(ResourceNotFound):
            self.fs.move(self.ctx, Reference(path="/a"), Reference(path="/c"))

    def test_move_into_self(self):
        self.fs.create_dir(self.ctx, Reference(path="/a"))
        self.fs.upload(self.ctx, Reference(path="/a/f.txt"), b"x")
        with self.assertRaises(StorageClientError) as cm:
            self.fs.move(self.ctx, Reference(path="/a"), Reference(path="/a/b"))
        self.assertEqual(cm.exception.code, 400)
        with self.assertRaises(StorageClientError):
            self.fs.move(self.ctx, Reference(path="/a"), Reference(path="/a"))

        self.assertEqual(list(self.srv.spaces["einstein"].nodes.keys()), ["/", "/a", "/a/f.txt"])
        self.assertEqual([i.path for i in self.fs.list_folder(self.ctx, Reference(path="/"))], ["/a"])

        self.fs.move(self.ctx, Reference(path="/a"), Reference(path="/ab"))
        self.assertEqual([i.path for i in self.fs.list_folder(self.ctx, Reference(path="/ab"))],
                         ["/ab/f.txt"])

    def test_revisions(self):
        ref = Reference(path="/notes.txt")
        self.fs.upload(self.ctx, ref, b"version 1")
        self.assertEqual(self.fs.list_revisions(self.ctx, ref), [])

        self.fs.upload(self.ctx, ref, b"version 2!")
        revs = self.fs.list_revisions(self.ctx, ref)
        self.assertEqual(len(revs), 1)
        self.assertEqual(revs[0].size, 9)
        self.assertEqual(self.fs.download_revision(self.ctx, ref, revs[0].key).read(), b"version 1")
        with self.assertRaises(ResourceNotFound):
            self.fs.download_revision(self.ctx, ref, "goob")

        self.fs.restore_revision(self.ctx, ref, revs[0].key)
        self.assertEqual(self.fs.download(self.ctx, ref).read(), b"version 1")
        revs = self.fs.list_revisions(self.ctx, ref)
        self.assertEqual(len(revs), 1)
        self.assertEqual(self.fs.download_revision(self.ctx, ref, revs[0].key).read(), b"version 2!")

    def test_revision_keys_unique(self):
        ref = Reference(path="/notes.txt")
        for i in range(4):
            self.fs.upload(self.ctx, ref, b"same")
        revs = self.fs.list_revisions(self.ctx, ref)
        self.assertEqual(len(revs), 3)
        self.assertEqual(len(set(r.key for r in revs)), 3)

        self.fs.restore_revision(self.ctx, ref, revs[1].key)
        keys = [r.key for r in self.fs.list_revisions(self.ctx, ref)]
        self.assertEqual(len(keys), 3)
        self.assertEqual(len(set(keys)), 3)
        self.assertNotIn(revs[1].key, keys)

    def test_recycle(self):
        self.fs.create_dir(self.ctx, Reference(path="/trash"))
        self.fs.upload(self.ctx, Reference(path="/trash/a.txt"), b"aaa")
        self.fs.upload(self.ctx, Reference(path="/b.txt"), b"bb")

        self.fs.delete(self.ctx, Reference(path="/trash"))
        self.fs.delete(self.ctx, Reference(path="/b.txt"))
        with self.assertRaises(ResourceNotFound):
            self.fs.delete(self.ctx, Reference(path="/b.txt"))
        self.assertEqual(self.fs.list_folder(self.ctx, Reference(path="/")), [])

        items = self.fs.list_recycle(self.ctx, "", "/")
        self.assertEqual(len(items), 2)
        bykey = dict((i.key, i) for i in items)
        trashkey = [k for k in bykey if k.startswith("trash.d")][0]
        bkey = [k for k in bykey if k.startswith("b.txt.d")][0]
        self.assertEqual(bykey[trashkey].size, 3)
        self.assertGreater(bykey[bkey].deletion_time.seconds, 0)

        self.fs.restore_recycle_item(self.ctx, trashkey, "/", Reference())
        self.assertEqual(self.fs.download(self.ctx, Reference(path="/trash/a.txt")).read(), b"aaa")

        self.fs.restore_recycle_item(self.ctx, bkey, "/", Reference(path="/trash/b.txt"))
        self.assertEqual(self.fs.download(self.ctx, Reference(path="/trash/b.txt")).read(), b"bb")
        self.assertEqual(self.fs.list_recycle(self.ctx, "", "/"), [])

        self.fs.delete(self.ctx, Reference(path="/trash/a.txt"))
        key = self.fs.list_recycle(self.ctx, "", "/")[0].key
        self.fs.purge_recycle_item(self.ctx, key, "/")
        with self.assertRaises(ResourceNotFound):
            self.fs.purge_recycle_item(self.ctx, key, "/")
        with self.assertRaises(ResourceNotFound):
            self.fs.restore_recycle_item(self.ctx, key, "/", None)

        self.fs.delete(self.ctx, Reference(path="/trash"))
        self.fs.empty_recycle(self.ctx)
        self.assertEqual(self.fs.list_recycle(self.ctx, "", "/"), [])

    def test_grants(self):
        ref = Reference(path="/shared")
        self.fs.create_dir(self.ctx, ref)
        marie = Grantee(type=GranteeType.USER,
                        user_id=UserId(idp="localhost", opaque_id="marie", type=UserType.PRIMARY))
        grant = Grant(grantee=marie, permissions=ResourcePermissions(stat=True, list_container=True))

        self.fs.add_grant(self.ctx, ref, grant)
        with self.assertRaises(StorageClientError):
            self.fs.add_grant(self.ctx, ref, grant)
        grants = self.fs.list_grants(self.ctx, ref)
        self.assertEqual(grants, [grant])

        grant.permissions.move = True
        self.fs.update_grant(self.ctx, ref, grant)
        self.assertEqual(self.fs.list_grants(self.ctx, ref)[0].permissions.granted(),
                         ["list_container", "move", "stat"])

        self.fs.deny_grant(self.ctx, ref, marie)
        self.assertEqual(self.fs.list_grants(self.ctx, ref)[0].permissions.granted(), [])

        self.fs.remove_grant(self.ctx, ref, grant)
        self.assertEqual(self.fs.list_grants(self.ctx, ref), [])
        with self.assertRaises(ResourceNotFound):
            self.fs.remove_grant(self.ctx, ref, grant)
        with self.assertRaises(ResourceNotFound):
            self.fs.update_grant(self.ctx, ref, grant)

    def test_quota(self):
        total, used = self.fs.get_quota(self.ctx)
        self.assertGreater(total, 0)
        self.assertEqual(used, 0)
        self.fs.upload(self.ctx, Reference(path="/a.bin"), b"12345")
        self.assertEqual(self.fs.get_quota(self.ctx), (total, 5))

    def test_arbitrary_metadata(self):
        ref = Reference(path="/a.txt")
        self.fs.upload(self.ctx, ref, b"x")
        self.fs.set_arbitrary_metadata(self.ctx, ref, ArbitraryMetadata(metadata={"color": "blue",
                                                                                  "size": "big"}))
        info = self.fs.get_md(self.ctx, ref)
        self.assertEqual(info.arbitrary_metadata.metadata, {"color": "blue", "size": "big"})
        info = self.fs.get_md(self.ctx, ref, ["color"])
        self.assertEqual(info.arbitrary_metadata.metadata, {"color": "blue"})

        self.fs.unset_arbitrary_metadata(self.ctx, ref, ["color", "size"])
        self.assertIsNone(self.fs.get_md(self.ctx, ref).arbitrary_metadata)

    def test_storage_spaces(self):
        spaces = self.fs.list_storage_spaces(self.ctx)
        self.assertEqual(len(spaces), 1)
        self.assertEqual(spaces[0].owner.username, "einstein")
        self.assertEqual(spaces[0].space_type, "personal")

        with self.assertRaises(NotSupported):
            self.fs.create_storage_space(self.ctx, CreateStorageSpaceRequest(name="x"))

    def test_misc(self):
        ids = self.fs.initiate_upload(self.ctx, Reference(path="/up.txt"), 10)
        self.assertEqual(ids, {"simple": "/~einstein/api/Upload/up.txt"})
        self.fs.create_reference(self.ctx, "/ref", "cs3:some/target")
        self.fs.shutdown(self.ctx)
        self.assertIn("POST "+EP+'~einstein/api/CreateReference {"path": "/ref"}', self.fs.client.called)


if __name__ == '__main__':
    test.main()
