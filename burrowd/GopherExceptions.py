from __future__ import annotations

import errno
import typing

from burrowd import logger

if typing.TYPE_CHECKING:
    from burrowd.handlers.base import BaseHandler
    from burrowd.protocols.base import BaseGopherProtocol


tracebacks = False


def log(
    exception: BaseException,
    protocol: typing.Optional[BaseGopherProtocol] = None,
    handler: typing.Optional[BaseHandler] = None,
):
    """Logs an exception.  It will try to generate a nice-looking string
    based on the arguments passed in."""
    protostr = "None"
    handlerstr = "None"
    ipaddr = "unknown-address"
    exceptionclass = type(exception).__name__
    if protocol:
        protostr = type(protocol).__name__
        ipaddr = protocol.requesthandler.client_address[0]
    if handler:
        handlerstr = type(handler).__name__

    logger.log(
        "%s [%s/%s] EXCEPTION %s: %s"
        % (ipaddr, protostr, handlerstr, exceptionclass, str(exception))
    )


def init(backtraceenabled: bool) -> None:
    global tracebacks
    tracebacks = backtraceenabled


class FileNotFound(Exception):
    """The selector names nothing the client may see.  Raised both for
    missing resources and for ones we are not allowed to open; the client
    gets the same answer either way, only the comments differ."""

    def __init__(
        self,
        selector: str,
        comments: str = "",
        protocol: typing.Optional[BaseGopherProtocol] = None,
    ):
        super().__init__(selector, comments)
        self.selector = selector
        self.comments = comments
        self.protocol = protocol

        log(self, self.protocol, None)

    def __str__(self):
        retval = "'%s' does not exist" % self.selector
        if self.comments:
            retval += " (%s)" % self.comments

        return retval


class SelectorOutsideRoot(Exception):
    """The normalized selector resolves to a path outside the document
    root.  Never answered on the wire."""

    def __init__(self, selector: str, fspath: str = ""):
        super().__init__(selector, fspath)
        self.selector = selector
        self.fspath = fspath

    def __str__(self):
        return "'%s' is outside the document root" % self.selector


class ShortWrite(OSError):
    """The transport accepted fewer bytes than it was handed."""

    def __init__(self, requested: int, written: int):
        super().__init__(
            "short write: %d of %d bytes accepted" % (written, requested)
        )
        self.requested = requested
        self.written = written


def fromoserror(
    exception: OSError,
    selector: str,
    protocol: typing.Optional[BaseGopherProtocol] = None,
) -> typing.Optional[FileNotFound]:
    """Maps an error from opening or stat'ing a selector to what the
    client should be told.  Missing and forbidden resources look alike
    on the wire.  Returns None for anything else, which is only logged."""
    if exception.errno in (errno.ENOENT, errno.ENOTDIR):
        return FileNotFound(selector, "not found", protocol)
    if exception.errno in (errno.EACCES, errno.EPERM):
        return FileNotFound(selector, "access denied", protocol)
    return None
