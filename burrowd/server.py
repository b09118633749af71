import configparser
import errno
import io
import socket
import socketserver
import struct
import time
import traceback
import typing

from burrowd import GopherExceptions, logger
from burrowd.protocols.rfc1436 import GopherProtocol

MAXREQUEST = 512


class ServerConfig(typing.NamedTuple):
    """What every connection needs to know about the server.  Built once,
    after the listening socket is bound, and never changed afterwards."""

    root: str
    hostname: str
    port: int


class BaseServer(socketserver.BaseServer):
    serverconfig: ServerConfig

    allow_reuse_address: bool = True

    def __init__(
        self,
        config: configparser.ConfigParser,
        *args: typing.Any,
        **kwargs: typing.Any
    ):
        self.config = config
        self.accept_failures = 0
        self.accept_backoff_base = config.getfloat(
            "burrowd", "accept_backoff_base", fallback=0.01
        )
        self.accept_backoff_max = config.getfloat(
            "burrowd", "accept_backoff_max", fallback=1.0
        )
        super().__init__(*args, **kwargs)

    def server_bind(self) -> None:
        super().server_bind()

        if self.config.has_option("burrowd", "timeout"):
            timeout = struct.pack("ll", self.config.getint("burrowd", "timeout"), 0)
            self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_RCVTIMEO, timeout)
            self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_SNDTIMEO, timeout)

        host, port = self.socket.getsockname()[:2]
        if self.config.has_option("burrowd", "servername"):
            hostname = self.config.get("burrowd", "servername")
        else:
            hostname = socket.getfqdn(host)

        if self.config.has_option("burrowd", "advertisedport"):
            port = self.config.getint("burrowd", "advertisedport")

        self.serverconfig = ServerConfig(
            root=self.config.get("burrowd", "root"), hostname=hostname, port=port
        )

    def get_request(self) -> typing.Tuple[socket.socket, typing.Any]:
        """Accepts a connection.  A failed accept is dropped by the caller
        and the loop carries on; consecutive failures back off
        exponentially so a persistent error does not spin."""
        try:
            request = super().get_request()
        except OSError:
            self.accept_failures += 1
            time.sleep(self.getacceptdelay())
            raise
        self.accept_failures = 0
        return request

    def getacceptdelay(self) -> float:
        if self.accept_failures <= 0:
            return 0.0
        delay = self.accept_backoff_base * 2 ** (self.accept_failures - 1)
        return min(self.accept_backoff_max, delay)


class ForkingTCPServer(BaseServer, socketserver.ForkingTCPServer):
    pass


class ThreadingTCPServer(BaseServer, socketserver.ThreadingTCPServer):
    daemon_threads = True


class GopherRequestHandler(socketserver.StreamRequestHandler):
    """Owns one accepted connection: reads the single request line and
    hands it to the protocol.  socketserver closes the connection when
    handle() returns, whatever happened inside it."""

    rfile: io.BytesIO
    wfile: io.BytesIO
    server: BaseServer

    def readrequest(self) -> typing.Optional[str]:
        """Returns the request line, or None if the client did not send
        a usable one."""
        try:
            line = self.rfile.readline(MAXREQUEST + 2)
        except OSError as e:
            GopherExceptions.log(e)
            return None
        if not line or (len(line) == MAXREQUEST + 2 and not line.endswith(b"\n")):
            return None
        return line.decode(errors="surrogateescape")

    def handle(self) -> None:
        request = self.readrequest()
        if request is None:
            logger.log("%s Malformed request from client" % self.client_address[0])
            return

        logger.log(
            "%s REQUEST: %s" % (self.client_address[0], request.rstrip("\r\n"))
        )
        protohandler = GopherProtocol(
            request, self.server, self, self.rfile, self.wfile, self.server.config
        )
        try:
            protohandler.handle()
        except IOError as e:
            if GopherExceptions.tracebacks and e.errno not in [
                errno.ECONNRESET,
                errno.EPIPE,
            ]:
                traceback.print_exc()
            GopherExceptions.log(e, protohandler, None)
        except Exception as e:
            if GopherExceptions.tracebacks:
                traceback.print_exc()
            GopherExceptions.log(e, protohandler, None)
