import io, os, logging, tempfile
import unittest as test
from contextlib import redirect_stdout

from sciencemesh.base import cli
from sciencemesh.base import config as cfgmod
from sciencemesh.storage import cmd, registry, Context
from sciencemesh.storage.nextcloud import NextcloudStorageDriver
from sciencemesh.cs3 import *

tmpdir = tempfile.TemporaryDirectory(prefix="_test_ncfs_cmds.")
EP = "http://localhost/apps/sciencemesh/"

def tearDownModule():
    if cfgmod._log_handler:
        logging.getLogger().removeHandler(cfgmod._log_handler)
        cfgmod._log_handler.close()
        cfgmod._log_handler = None
    registry._factories.pop("shared", None)
    tmpdir.cleanup()

class TestNcfsCommands(test.TestCase):

    def setUp(self):
        self.fs = NextcloudStorageDriver({"end_point": EP, "mock_http": True})
        registry.register("shared", lambda config, log: self.fs)
        self.config = {"driver": "shared", "idp": "localhost"}
        self.ctx = Context(User(username="einstein"))

        self.workdir = tempfile.mkdtemp(dir=tmpdir.name)
        self.cmd = cli.CLISuite("ncfs")
        cmd.load_commands(self.cmd)

    def run_cmd(self, *args):
        argv = ["-q", "-w", self.workdir, "-U", "einstein"] + list(args)
        out = io.StringIO()
        with redirect_stdout(out):
            self.cmd.execute(argv, self.config)
        return out.getvalue()

    def upload(self, path, content):
        self.fs.upload(self.ctx, Reference(path=path), content)

    def test_parse(self):
        args = self.cmd.parse_args("-q -U marie ls -l /docs".split())
        self.assertEqual(args.cmd, "ls")
        self.assertEqual(args.user, "marie")
        self.assertEqual(args.path, "/docs")
        self.assertTrue(args.long)

        args = self.cmd.parse_args("recycle restore -t /a.txt a.txt.d1234".split())
        self.assertEqual(args.cmd, "recycle")
        self.assertEqual(args.recycle_subcmd, "restore")
        self.assertEqual(args.key, "a.txt.d1234")
        self.assertEqual(args.dest, "/a.txt")

    def test_get_user(self):
        args = self.cmd.parse_args("-U marie home".split())
        u = cmd.get_user(args, {"idp": "cernbox"})
        self.assertEqual(u.username, "marie")
        self.assertEqual(u.id, UserId(idp="cernbox", opaque_id="marie", type=UserType.PRIMARY))

        args = self.cmd.parse_args(["home"])
        self.assertTrue(cmd.get_user(args, {}).username)

    def test_home(self):
        self.assertEqual(self.run_cmd("home", "--create"), "/\n")
        self.assertIn("POST "+EP+"~einstein/api/CreateHome ", self.fs.client.called)

    def test_mkdir_ls_stat(self):
        self.run_cmd("mkdir", "/docs", "/docs/sub")
        self.upload("/docs/report.txt", b"hello world")

        self.assertEqual(self.run_cmd("ls", "/docs"), "report.txt\nsub/\n")
        out = self.run_cmd("ls", "-l", "/docs").splitlines()
        self.assertEqual(len(out), 2)
        self.assertTrue(out[0].startswith("- "))
        self.assertIn(" 11 ", out[0])
        self.assertTrue(out[1].startswith("d "))

        out = self.run_cmd("stat", "/docs/report.txt")
        self.assertIn("path:      /docs/report.txt", out)
        self.assertIn("type:      file", out)
        self.assertIn("size:      11", out)

        self.assertIn('"mime_type": "text/plain"', self.run_cmd("stat", "-j", "/docs/report.txt"))

    def test_not_found(self):
        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("stat", "/goob")
        self.assertEqual(cm.exception.stat, 1)
        self.assertEqual(cm.exception.cmd, "stat")
        self.assertIn("/goob", str(cm.exception))

        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("mkdir", "/goob/gurn")
        self.assertEqual(cm.exception.stat, 1)

    def test_storage_error(self):
        self.run_cmd("mkdir", "/docs")
        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("mkdir", "/docs")
        self.assertEqual(cm.exception.stat, 5)

    def test_config_error(self):
        self.config = {"driver": "nextcloud", "drivers": {"nextcloud": {"mock_http": True}}}
        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("ls")
        self.assertEqual(cm.exception.stat, 6)

    def test_rm_mv(self):
        self.upload("/a.txt", b"a")
        self.upload("/b.txt", b"b")
        self.run_cmd("mv", "/a.txt", "/c.txt")
        self.run_cmd("rm", "/b.txt")
        self.assertEqual(self.run_cmd("ls"), "c.txt\n")

        with self.assertRaises(cli.CommandFailure):
            self.run_cmd("rm", "/b.txt")
        self.run_cmd("rm", "-f", "/b.txt", "/c.txt")
        self.assertEqual(self.run_cmd("ls"), "")

    def test_get_put(self):
        src = os.path.join(self.workdir, "local.txt")
        with open(src, 'w') as fd:
            fd.write("local contents")
        self.run_cmd("put", "local.txt", "/")
        self.run_cmd("put", "-t", "text/markdown", src, "/notes.md")

        self.run_cmd("get", "/local.txt", "-o", "copy.txt")
        with open(os.path.join(self.workdir, "copy.txt")) as fd:
            self.assertEqual(fd.read(), "local contents")

        self.run_cmd("get", "/notes.md")
        self.assertTrue(os.path.isfile(os.path.join(self.workdir, "notes.md")))

        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("put", "goob.txt", "/goob.txt")
        self.assertEqual(cm.exception.stat, 3)
        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("get", "/goob.txt")
        self.assertEqual(cm.exception.stat, 1)

    def test_revisions(self):
        self.upload("/a.txt", b"one")
        self.upload("/a.txt", b"two!")
        out = self.run_cmd("revisions", "/a.txt").splitlines()
        self.assertEqual(len(out), 1)
        key = out[0].split()[0]

        self.run_cmd("get", "-r", key, "-o", "old.txt", "/a.txt")
        with open(os.path.join(self.workdir, "old.txt")) as fd:
            self.assertEqual(fd.read(), "one")

        self.run_cmd("revisions", "-R", key, "/a.txt")
        self.assertEqual(self.fs.download(self.ctx, Reference(path="/a.txt")).read(), b"one")

    def test_meta(self):
        self.upload("/a.txt", b"a")
        self.run_cmd("meta", "/a.txt", "color=blue", "shape=round")
        out = self.run_cmd("stat", "/a.txt")
        self.assertIn("  color: blue", out)
        self.assertIn("  shape: round", out)

        self.run_cmd("meta", "-u", "color", "/a.txt")
        out = self.run_cmd("stat", "/a.txt")
        self.assertNotIn("color", out)

        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("meta", "/a.txt", "goob")
        self.assertEqual(cm.exception.stat, 2)
        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("meta", "/a.txt")
        self.assertEqual(cm.exception.stat, 2)

    def test_grants(self):
        self.run_cmd("mkdir", "/shared")
        self.run_cmd("grants", "-a", "marie", "/shared")
        self.assertEqual(self.run_cmd("grants", "/shared"),
                         "localhost:marie get_path,initiate_file_download,list_container,stat\n")

        self.run_cmd("grants", "-u", "localhost:marie", "-p", "stat", "/shared")
        self.assertEqual(self.run_cmd("grants", "/shared"), "localhost:marie stat\n")

        self.run_cmd("grants", "-d", "marie", "/shared")
        self.assertEqual(self.run_cmd("grants", "/shared"), "localhost:marie (none)\n")

        self.run_cmd("grants", "-r", "marie", "/shared")
        self.assertEqual(self.run_cmd("grants", "/shared"), "")

        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("grants", "-a", "marie", "-p", "goob", "/shared")
        self.assertEqual(cm.exception.stat, 2)

    def test_quota(self):
        self.upload("/a.bin", b"12345")
        out = self.run_cmd("quota").splitlines()
        self.assertEqual(out[1], "used:  5")
        total = int(out[0].split()[1])
        self.assertEqual(out[2], "free:  %d" % (total - 5))

    def test_recycle(self):
        self.upload("/a.txt", b"a")
        self.upload("/b.txt", b"b")
        self.run_cmd("rm", "/a.txt", "/b.txt")

        out = self.run_cmd("recycle", "ls").splitlines()
        self.assertEqual(len(out), 2)
        keys = dict((line.split()[0][0], line.split()[0]) for line in out)

        self.run_cmd("recycle", "restore", keys['a'])
        self.assertTrue(self.fs.client.called[-1].endswith('"restoreRef": {}}'))
        self.assertEqual(self.run_cmd("ls"), "a.txt\n")
        self.run_cmd("recycle", "restore", "-t", "/c.txt", keys['b'])
        self.assertEqual(self.run_cmd("ls"), "a.txt\nc.txt\n")

        self.run_cmd("rm", "/a.txt")
        key = self.run_cmd("recycle", "ls").split()[0]
        self.run_cmd("recycle", "purge", key)
        self.assertEqual(self.run_cmd("recycle", "ls"), "")

        with self.assertRaises(cli.CommandFailure) as cm:
            self.run_cmd("recycle", "purge", key)
        self.assertEqual(cm.exception.stat, 1)
        self.assertEqual(cm.exception.cmd, "recycle purge")

        self.run_cmd("rm", "/c.txt")
        self.run_cmd("recycle", "empty")
        self.assertEqual(self.run_cmd("recycle", "ls"), "")


if __name__ == '__main__':
    test.main()
