import io, os, sys, logging, tempfile
import unittest as test
from unittest.mock import patch
from contextlib import redirect_stdout

from sciencemesh.cli import ncfs
from sciencemesh.base import cli
from sciencemesh.base import config as cfgmod

tmpdir = tempfile.TemporaryDirectory(prefix="_test_ncfs_main.")

def tearDownModule():
    if cfgmod._log_handler:
        logging.getLogger().removeHandler(cfgmod._log_handler)
        cfgmod._log_handler.close()
        cfgmod._log_handler = None
    tmpdir.cleanup()

class TestNcfsMain(test.TestCase):

    def setUp(self):
        self.conffile = os.path.join(tmpdir.name, "ncfs.yml")
        with open(self.conffile, 'w') as fd:
            fd.write("driver: nextcloud\n")
            fd.write("drivers:\n")
            fd.write("  nextcloud:\n")
            fd.write("    end_point: http://localhost/apps/sciencemesh\n")
            fd.write("    mock_http: true\n")

    def test_main(self):
        out = io.StringIO()
        with redirect_stdout(out):
            ncfs.main("ncfs", ["-q", "-w", tmpdir.name, "-c", self.conffile, "-U", "einstein", "home"])
        self.assertEqual(out.getvalue(), "/\n")
        self.assertTrue(os.path.isfile(os.path.join(tmpdir.name, "ncfs.log")))

    def test_main_failure(self):
        with self.assertRaises(cli.CommandFailure) as cm:
            ncfs.main("ncfs", ["-q", "-w", tmpdir.name, "-c", self.conffile, "-U", "einstein",
                               "stat", "/goob"])
        self.assertEqual(cm.exception.stat, 1)

    def test_run(self):
        argv = ["ncfs", "-q", "-w", tmpdir.name, "-c", self.conffile, "-U", "einstein", "ls"]
        with patch.object(sys, "argv", argv), redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                ncfs.run()
        self.assertEqual(cm.exception.code, 0)

        argv = ["ncfs", "-q", "-w", tmpdir.name, "-c", self.conffile, "-U", "einstein", "rm", "/goob"]
        with patch.object(sys, "argv", argv):
            with self.assertRaises(SystemExit) as cm:
                ncfs.run()
        self.assertEqual(cm.exception.code, 1)

        argv = ["ncfs", "-q", "-c", os.path.join(tmpdir.name, "goob.yml"), "ls"]
        with patch.object(sys, "argv", argv):
            with self.assertRaises(SystemExit) as cm:
                ncfs.run()
        self.assertEqual(cm.exception.code, 6)


if __name__ == '__main__':
    test.main()
