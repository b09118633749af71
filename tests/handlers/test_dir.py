import os
import unittest

from burrowd import testutil
from burrowd.handlers.base import VFS_Real
from burrowd.handlers.dir import DirHandler


class TestDirHandler(unittest.TestCase):
    def setUp(self):
        self.config = testutil.get_config()
        self.vfs = VFS_Real(self.config.get("burrowd", "root"))
        self.selector = "/sub"
        self.protocol = testutil.get_testing_protocol(self.selector, config=self.config)
        self.stat_result = self.vfs.stat(self.selector)

    def test_dir_handler(self):
        handler = DirHandler(
            self.selector, "", self.protocol, self.config, self.stat_result, self.vfs
        )

        self.assertTrue(handler.canhandlerequest())
        self.assertTrue(handler.isdir())

        handler.prepare()
        entries = list(handler.getdirlist())
        self.assertEqual(
            [(e.type, e.name, e.selector) for e in entries],
            [
                ("1", "deeper", "/sub/deeper"),
                ("0", "readme.txt", "/sub/readme.txt"),
            ],
        )

    def test_ignorepatt(self):
        self.config.set("handlers.dir.DirHandler", "ignorepatt", r"\.txt$")
        handler = DirHandler(
            self.selector, "", self.protocol, self.config, self.stat_result, self.vfs
        )
        handler.prepare()
        self.assertEqual([e.name for e in handler.getdirlist()], ["deeper"])

    def test_not_for_files(self):
        stat_result = self.vfs.stat("/testfile.txt")
        handler = DirHandler(
            "/testfile.txt", "", self.protocol, self.config, stat_result, self.vfs
        )
        self.assertFalse(handler.canhandlerequest())


class TestDirHandlerKinds(unittest.TestCase):
    def setUp(self):
        self.root = testutil.make_root({"notes.txt": b"hi\n", "pics": None})
        self.addCleanup(testutil.remove_root, self.root)
        self.config = testutil.get_config(self.root)
        self.vfs = VFS_Real(self.root)
        self.protocol = testutil.get_testing_protocol("/", config=self.config)

    def get_entries(self):
        handler = DirHandler(
            "/", "", self.protocol, self.config, self.vfs.stat("/"), self.vfs
        )
        handler.prepare()
        return list(handler.getdirlist())

    def test_root_listing(self):
        self.assertEqual(
            [(e.type, e.name, e.selector) for e in self.get_entries()],
            [("0", "notes.txt", "/notes.txt"), ("1", "pics", "/pics")],
        )

    def test_dangling_symlink_is_info(self):
        os.symlink(os.path.join(self.root, "gone"), os.path.join(self.root, "link"))
        entries = self.get_entries()
        link = [e for e in entries if e.name == "link"][0]
        self.assertEqual(link.type, "i")
        self.assertEqual(link.selector, "F")

    @unittest.skipUnless(hasattr(os, "mkfifo"), "no FIFOs on this platform")
    def test_fifo_is_info(self):
        os.mkfifo(os.path.join(self.root, "pipe"))
        entries = self.get_entries()
        pipe = [e for e in entries if e.name == "pipe"][0]
        self.assertEqual(pipe.type, "i")

    def test_enumeration_failure(self):
        handler = DirHandler(
            "/", "", self.protocol, self.config, self.vfs.stat("/"), self.vfs
        )
        testutil.remove_root(self.root)
        self.assertRaises(FileNotFoundError, handler.prepare)

    def test_control_characters_in_name(self):
        try:
            with open(os.path.join(self.root, "a\r\nb\t.txt"), "wb"):
                pass
        except OSError:
            self.skipTest("Filesystem does not allow control characters in names.")
        entries = [e for e in self.get_entries() if e.name.startswith("a")]
        self.assertEqual(
            [(e.type, e.name, e.selector) for e in entries],
            [("i", "a??b?.txt", "F")],
        )
