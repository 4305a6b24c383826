import logging
import unittest as test

from sciencemesh.storage import ctx, exceptions as exc
from sciencemesh.cs3.identity import User, UserId

class TestContext(test.TestCase):

    def test_get_user(self):
        u = User(id=UserId(idp="x", opaque_id="einstein"), username="einstein")
        self.assertIs(ctx.get_user(ctx.Context(u)), u)

        with self.assertRaises(exc.UserRequired) as cm:
            ctx.get_user(ctx.Context())
        self.assertEqual(str(cm.exception),
                         "nextcloud storage driver: error getting user from ctx: user required")
        with self.assertRaises(exc.UserRequired):
            ctx.get_user(None)

    def test_get_logger(self):
        log = logging.getLogger("req")
        dflt = logging.getLogger("driver")
        self.assertIs(ctx.get_logger(ctx.Context(log=log), dflt), log)
        self.assertIs(ctx.get_logger(ctx.Context(), dflt), dflt)
        self.assertIs(ctx.get_logger(None, dflt), dflt)
        self.assertEqual(ctx.get_logger(None).name, "storage")

    def test_str(self):
        self.assertEqual(str(ctx.Context(User(username="marie"))), "Context(marie)")
        self.assertEqual(str(ctx.Context()), "Context((anonymous))")

class TestExceptions(test.TestCase):

    def test_hierarchy(self):
        ex = exc.ResourceNotFound("http://nc/api/GetMD")
        self.assertIsInstance(ex, exc.StorageClientError)
        self.assertIsInstance(ex, exc.StorageException)
        self.assertEqual(ex.code, 404)
        self.assertEqual(ex.ep, "http://nc/api/GetMD")
        self.assertIn("not found", str(ex))

        ex = exc.UnexpectedStorageResponse("bad json", "GetMD", "{", 200)
        self.assertIsInstance(ex, exc.StorageServerError)
        self.assertEqual(str(ex), "bad json")
        self.assertEqual(ex.response, "{")
        self.assertEqual(ex.code, 200)

        ex = exc.StorageUserUnauthorized("ep")
        self.assertEqual(ex.code, 403)

    def test_comm_error(self):
        cause = OSError("connection refused")
        ex = exc.StorageCommError(None, "http://nc/", cause)
        self.assertIs(ex.cause, cause)
        self.assertIn("http://nc/", str(ex))
        self.assertEqual(ex.code, 0)

    def test_not_supported(self):
        ex = exc.NotSupported("CreateStorageSpace")
        self.assertEqual(str(ex), "unimplemented: CreateStorageSpace")
        self.assertEqual(ex.operation, "CreateStorageSpace")


if __name__ == '__main__':
    test.main()
