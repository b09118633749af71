import os
import unittest
from io import BytesIO
from unittest import mock

from burrowd import gopherentry, testutil
from burrowd.handlers.gophermap import GophermapHandler
from burrowd.protocols.base import slashnormalize
from burrowd.protocols.rfc1436 import GopherProtocol


class SlashNormalizeTestCase(unittest.TestCase):
    def test_slashnormalize(self):
        cases = [
            ("", "/"),
            ("/", "/"),
            ("//", "/"),
            (".", "/"),
            ("/a/..", "/"),
            ("foo", "/foo"),
            ("foo/", "/foo"),
            ("/foo/bar/", "/foo/bar"),
            ("/a/./b", "/a/b"),
            ("a//b", "/a/b"),
            ("/a/../b", "/b"),
            ("/../../etc/passwd", "/../../etc/passwd"),
            ("../../etc/passwd", "/../../etc/passwd"),
            ("/a/../../x", "/../x"),
        ]
        for selector, expected in cases:
            with self.subTest(selector=selector):
                self.assertEqual(slashnormalize(selector), expected)

    def test_idempotent(self):
        for selector in [
            "",
            "a/b/../c//d/",
            "/../x/./y",
            "././..//..",
            "/menu",
            "x/" * 20 + "../" * 25,
        ]:
            with self.subTest(selector=selector):
                once = slashnormalize(selector)
                self.assertEqual(slashnormalize(once), once)


class RFC1436TestCase(unittest.TestCase):
    def setUp(self):
        self.config = testutil.get_config()
        self.logfile = testutil.get_string_logger()

    def get_proto(self, request: str) -> GopherProtocol:
        proto = testutil.get_testing_protocol(request, config=self.config)
        self.port = proto.server.serverconfig.port
        return proto

    def output(self, proto: GopherProtocol) -> bytes:
        return proto.wfile.getvalue()

    def test_request_parsing(self):
        proto = self.get_proto("/testfile.txt\tsearch\r\n")
        self.assertEqual(proto.rawselector, "/testfile.txt")
        self.assertEqual(proto.selector, "/testfile.txt")
        self.assertEqual(proto.searchrequest, "search")

        proto = self.get_proto("  sub/  \r\n")
        self.assertEqual(proto.selector, "/sub")
        self.assertIsNone(proto.searchrequest)

    def test_renderobjinfo(self):
        proto = self.get_proto("/")
        entry = gopherentry.GopherEntry("/testfile.txt")
        entry.type = "0"
        entry.name = "testfile.txt"
        self.assertEqual(
            proto.renderobjinfo(entry),
            "0testfile.txt\t/testfile.txt\tlocalhost\t%d\r\n" % self.port,
        )

        entry.host = "elsewhere"
        entry.port = 7070
        self.assertEqual(
            proto.renderobjinfo(entry),
            "0testfile.txt\t/testfile.txt\telsewhere\t7070\r\n",
        )

    def test_renderobjinfo_info(self):
        proto = self.get_proto("/")
        self.assertEqual(
            proto.renderobjinfo(gopherentry.getinfoentry("Welcome")),
            "iWelcome\tF\tlocalhost\t%d\r\n" % self.port,
        )

    def test_rendererror(self):
        proto = self.get_proto("/")
        self.assertEqual(proto.rendererror("oops"), "3oops\terror\thost\t0\r\n")

    def test_handle_file(self):
        proto = self.get_proto("/testfile.txt\r\n")
        proto.handle()
        self.assertIn(
            "10.77.77.77 [GopherProtocol/FileHandler]: /testfile.txt\n",
            self.logfile.getvalue(),
        )
        self.assertEqual(self.output(proto), b"Test\n")

    def test_handle_dir(self):
        proto = self.get_proto("/sub\r\n")
        proto.handle()
        self.assertEqual(
            self.output(proto).decode(),
            "1deeper\t/sub/deeper\tlocalhost\t%d\r\n"
            "0readme.txt\t/sub/readme.txt\tlocalhost\t%d\r\n"
            ".\r\n" % (self.port, self.port),
        )

    def test_handle_gophermap(self):
        proto = self.get_proto("/menu\r\n")
        proto.handle()
        lines = self.output(proto).decode().split("\r\n")
        self.assertEqual(lines[0], "ihello world\tF\tlocalhost\t%d" % self.port)
        self.assertEqual(lines[1], "1filename\t/menu/filename\tlocalhost\t%d" % self.port)
        self.assertEqual(lines[4], "1filename\t/abs/selector\thostname\t69")
        self.assertEqual(lines[-2:], [".", ""])
        self.assertNotIn("", lines[:-1])

    def test_handle_not_found(self):
        proto = self.get_proto("/NONEXISTANT\r\n")
        proto.handle()
        self.assertEqual(
            self.output(proto),
            b"3Resource `/NONEXISTANT' not found\terror\thost\t0\r\n",
        )
        self.assertIn("does not exist (not found)", self.logfile.getvalue())

    def test_handle_not_found_keeps_raw_selector(self):
        proto = self.get_proto("missing/./file/\r\n")
        proto.handle()
        self.assertEqual(
            self.output(proto),
            b"3Resource `missing/./file/' not found\terror\thost\t0\r\n",
        )

    def test_handle_traversal(self):
        proto = self.get_proto("/../../etc/passwd\r\n")
        proto.handle()
        self.assertEqual(self.output(proto), b"")
        self.assertIn("EXCEPTION SelectorOutsideRoot", self.logfile.getvalue())

    def test_handle_nul(self):
        proto = self.get_proto("/testfile\0.txt\r\n")
        proto.handle()
        self.assertEqual(self.output(proto), b"")

    def test_handle_write_failure(self):
        proto = self.get_proto("/testfile.txt\r\n")
        proto.wfile = ShortWriter()
        proto.handle()
        self.assertIn("EXCEPTION ShortWrite", self.logfile.getvalue())
        self.assertIn("[GopherProtocol/FileHandler]", self.logfile.getvalue())


class ShortWriter(BytesIO):
    def write(self, data):
        return super().write(data[:1])


class RFC1436KindsTestCase(unittest.TestCase):
    def setUp(self):
        self.root = testutil.make_root(
            {
                "notes.txt": b"0123456789",
                "pics": None,
                "secret.txt": b"shh",
                "menu/gophermap": b"first\nsecond\n",
            }
        )
        self.addCleanup(testutil.remove_root, self.root)
        self.config = testutil.get_config(self.root)
        self.logfile = testutil.get_string_logger()

    def handle(self, request: str) -> bytes:
        proto = testutil.get_testing_protocol(request, config=self.config)
        self.port = proto.server.serverconfig.port
        proto.handle()
        return proto.wfile.getvalue()

    @unittest.skipUnless(hasattr(os, "mkfifo"), "no FIFOs on this platform")
    def test_stumped(self):
        os.mkfifo(os.path.join(self.root, "pipe"))
        self.assertEqual(
            self.handle("/pipe\r\n"),
            b"iSTUMPED\tF\tlocalhost\t%d\r\n" % self.port,
        )

    def test_text_is_verbatim(self):
        self.assertEqual(self.handle("/notes.txt\r\n"), b"0123456789")

    @unittest.skipIf(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        "root ignores file permissions",
    )
    def test_access_denied(self):
        os.chmod(os.path.join(self.root, "secret.txt"), 0)
        self.addCleanup(os.chmod, os.path.join(self.root, "secret.txt"), 0o644)
        self.assertEqual(
            self.handle("/secret.txt\r\n"),
            b"3Resource `/secret.txt' not found\terror\thost\t0\r\n",
        )
        self.assertIn("(access denied)", self.logfile.getvalue())

    def test_other_stat_failure(self):
        os.symlink("loop", os.path.join(self.root, "loop"))
        self.assertEqual(self.handle("/loop\r\n"), b"")
        self.assertIn("EXCEPTION OSError", self.logfile.getvalue())
        self.assertNotIn("FileNotFound", self.logfile.getvalue())

    def test_gophermap_read_failure(self):
        rfile = mock.Mock()
        rfile.readline.side_effect = [b"first\n", OSError(5, "Input/output error")]

        def prepare(handler):
            handler.rfile = rfile

        with mock.patch.object(GophermapHandler, "prepare", prepare):
            output = self.handle("/menu\r\n")
        self.assertEqual(output, b"ifirst\tF\tlocalhost\t%d\r\n" % self.port)
        self.assertIn(
            "[GopherProtocol/GophermapHandler] EXCEPTION OSError",
            self.logfile.getvalue(),
        )
        rfile.close.assert_called_once_with()
