import configparser
import os
import shutil
import socket
import tempfile
import threading
import typing
from io import BytesIO, StringIO

from burrowd import initialization, logger
from burrowd.protocols.rfc1436 import GopherProtocol
from burrowd.server import BaseServer, GopherRequestHandler, ThreadingTCPServer

TEST_DATA = os.path.join(os.path.dirname(__file__), "..", "testdata")
CONF_FILE = os.path.join(os.path.dirname(__file__), "..", "conf", "burrowd.conf")


def get_config(root: str = TEST_DATA) -> configparser.ConfigParser:
    config = initialization.init_config(CONF_FILE)
    config.set("burrowd", "root", os.path.abspath(root))
    config.set("burrowd", "servername", "localhost")
    config.set("burrowd", "interface", "localhost")
    config.set("burrowd", "port", "0")
    return config


def get_string_logger() -> StringIO:
    config = get_config()
    config.set("logger", "logmethod", "file")
    logger.init(config)
    fp = StringIO()

    def log(message: str) -> None:
        fp.write(message + "\n")

    logger.log = log
    return fp


def get_testing_server(
    config: typing.Optional[configparser.ConfigParser] = None,
) -> BaseServer:
    """A bound but closed server; good enough to hand to protocols."""
    config = config or get_config()
    s = initialization.get_server(config)
    s.server_close()
    return s


class MockRequest(socket.SocketType):
    def __init__(self, rfile: BytesIO, wfile: BytesIO):
        self.rfile = rfile
        self.wfile = wfile

    def makefile(self, mode: str, *_) -> BytesIO:
        if mode[0] == "r":
            return self.rfile
        return self.wfile


class MockRequestHandler(GopherRequestHandler):

    # Enable buffering (required to make the HandlerClass invoke RequestClass.makefile())
    rbufsize = -1
    wbufsize = -1

    output: bytes = b""

    def __init__(  # noqa
        self,
        request: MockRequest,
        client_address,
        server: BaseServer,
    ):
        self.request = request
        self.client_address = client_address
        self.server = server
        self.setup()
        # This does everything in the base class up to handle()

    def handle(self):
        # Normally finish() gets called in the __init__, but because we are
        # doing this roundabout method of calling handle() from inside of unit
        # tests, we want to make sure that the server cleans up after itself.
        try:
            super().handle()
        finally:
            self.finish()

    def finish(self):
        # finish() closes wfile, so grab what was written first.
        if not self.wfile.closed:
            self.output = self.wfile.getvalue()
        super().finish()


def get_testing_handler(
    rfile: BytesIO,
    wfile: BytesIO,
    config: typing.Optional[configparser.ConfigParser] = None,
) -> MockRequestHandler:
    """Creates a testing handler with input from rfile.  Fills in
    other stuff with fake values."""

    config = config or get_config()
    server = get_testing_server(config)
    request = MockRequest(rfile, wfile)
    address = ("10.77.77.77", "7777")
    return MockRequestHandler(request, address, server)


def get_testing_protocol(
    request: str,
    config: typing.Optional[configparser.ConfigParser] = None,
) -> GopherProtocol:
    config = config or get_config()
    rfile = BytesIO(request.encode(errors="surrogateescape"))
    handler = get_testing_handler(rfile, BytesIO(), config)
    return GopherProtocol(
        rfile.readline().decode(errors="surrogateescape"),
        handler.server,
        handler,
        handler.rfile,
        handler.wfile,
        config,
    )


def make_root(tree: typing.Dict[str, typing.Optional[bytes]]) -> str:
    """Builds a throwaway document root.  Keys are paths relative to the
    root; a value of None makes a directory, anything else a file with
    that content.  The caller removes it with remove_root()."""
    root = tempfile.mkdtemp(prefix="burrowd-test-")
    for name, data in sorted(tree.items()):
        path = os.path.join(root, name)
        if data is None:
            os.makedirs(path, exist_ok=True)
        else:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as fp:
                fp.write(data)
    return root


def remove_root(root: str) -> None:
    shutil.rmtree(root, ignore_errors=True)


class RunningServer:
    """A real ThreadingTCPServer serving root on an ephemeral port."""

    def __init__(self, root: str):
        self.config = get_config(root)
        self.config.set("logger", "logmethod", "none")
        logger.init(self.config)
        self.server = ThreadingTCPServer(
            self.config,
            ("localhost", 0),
            GopherRequestHandler,
        )
        self.thread = threading.Thread(target=self.server.serve_forever)
        self.thread.daemon = True
        self.thread.start()

    def fetch(self, request: bytes) -> bytes:
        """Sends one raw request and returns everything read until the
        server closes the connection."""
        chunks = []
        with socket.create_connection(self.server.server_address, timeout=5) as sock:
            sock.sendall(request)
            while True:
                try:
                    data = sock.recv(4096)
                except ConnectionResetError:
                    break
                if not data:
                    break
                chunks.append(data)
        return b"".join(chunks)

    def close(self) -> None:
        self.server.shutdown()
        self.server.server_close()
        self.thread.join(timeout=5)


def supports_non_utf8_filenames() -> bool:
    """
    Test non-utf8 filenames only if the host operating system supports them.
    """
    root = tempfile.mkdtemp(prefix="burrowd-test-")
    try:
        filename = os.path.join(root.encode(), b"\xAE.txt")
        with open(filename, "wb") as fp:
            fp.write(b"Hello, \xAE!")
    except OSError:
        return False
    else:
        return True
    finally:
        shutil.rmtree(root, ignore_errors=True)
