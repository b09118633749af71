# burrowd -- Gopher server in Python
# module: base protocol code
# Copyright (C) 2002 John Goerzen
# <jgoerzen@complete.org>
#
#    This program is free software; you can redistribute it and/or modify
#    it under the terms of the GNU General Public License as published by
#    the Free Software Foundation; version 2 of the License.
#
#    This program is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#    GNU General Public License for more details.
#
#    You should have received a copy of the GNU General Public License
#    along with this program; if not, write to the Free Software
#    Foundation, Inc., 59 Temple Place, Suite 330, Boston, MA  02111-1307  USA
from __future__ import annotations

import configparser
import io
import posixpath
import typing

from burrowd import GopherExceptions, logger
from burrowd.handlers import HandlerMultiplexer
from burrowd.handlers.base import VFS_Real

if typing.TYPE_CHECKING:
    from burrowd.gopherentry import GopherEntry
    from burrowd.handlers.base import BaseHandler
    from burrowd.server import BaseServer, GopherRequestHandler


def slashnormalize(selector: str) -> str:
    """Normalize the selector.  The result starts with exactly one slash,
    never ends with one unless it is the root '/', and has '.', '..' and
    doubled slashes collapsed.  '..' components that would climb above
    the root are kept so the resolver can refuse them.  Applying this
    twice gives the same result as applying it once."""
    selector = selector.strip("/")
    if selector:
        selector = posixpath.normpath(selector).strip("/")
        if selector == ".":
            selector = ""
    return "/" + selector


class BaseGopherProtocol:
    """Skeleton protocol -- includes commonly-used routines.  One instance
    lives for exactly one connection."""

    handler: typing.Optional[BaseHandler]

    def __init__(
        self,
        request: str,
        server: BaseServer,
        requesthandler: GopherRequestHandler,
        rfile: io.BufferedIOBase,
        wfile: io.BufferedIOBase,
        config: configparser.ConfigParser,
    ):
        """Parameters are:
        request -- the raw request line, line ending included or not.

        server -- the socketserver object; carries the ServerConfig.

        rfile -- input file.  The first line will already have been read.

        wfile -- output file.  Where the output should be sent.

        config -- a ConfigParser object."""

        self.request = request
        requestparts = [arg.strip() for arg in request.rstrip("\r\n").split("\t")]
        self.rfile = rfile
        self.wfile = wfile
        self.config = config
        self.server = server
        self.requesthandler = requesthandler
        self.requestlist = requestparts
        self.searchrequest = None
        if len(requestparts) > 1:
            self.searchrequest = requestparts[1]
        self.handler = None
        self.vfs = VFS_Real(server.serverconfig.root)

        self.rawselector = requestparts[0]
        self.selector = slashnormalize(self.rawselector)

    def log(self, handler: BaseHandler) -> None:
        """Log a handled request."""
        logger.log(
            "%s [%s/%s]: %s"
            % (
                self.requesthandler.client_address[0],
                type(self).__name__,
                type(handler).__name__,
                self.selector,
            )
        )

    def handle(self) -> None:
        """Handles the request.  Either one complete response is written,
        or nothing at all when the request is refused outright."""
        try:
            handler = self.gethandler()
            handler.prepare()
        except GopherExceptions.SelectorOutsideRoot as e:
            GopherExceptions.log(e, self, None)
            return
        except GopherExceptions.FileNotFound:
            self.filenotfound(f"Resource `{self.rawselector}' not found")
            return
        except OSError as e:
            notfound = GopherExceptions.fromoserror(e, self.selector, self)
            if notfound is None:
                GopherExceptions.log(e, self, self.handler)
            else:
                self.filenotfound(f"Resource `{self.rawselector}' not found")
            return

        self.log(handler)
        try:
            if handler.isdir():
                self.writedir(handler.getdirlist())
            else:
                handler.write(self.wfile)
        except OSError as e:
            # Whatever already went out stays out; the client sees a
            # truncated response followed by the close.
            GopherExceptions.log(e, self, handler)
        finally:
            handler.close()

    def send(self, data: str) -> None:
        buf = data.encode(errors="surrogateescape")
        written = self.wfile.write(buf)
        if written is not None and written != len(buf):
            raise GopherExceptions.ShortWrite(len(buf), written)

    def filenotfound(self, msg: str) -> None:
        self.send(self.rendererror(msg))

    def gethandler(self) -> BaseHandler:
        """Gets the handler for this object's selector."""
        if not self.handler:
            self.handler = HandlerMultiplexer.getHandler(
                self.selector, self.searchrequest, self, self.config, self.vfs
            )
        return self.handler

    def writedir(self, dirlist: typing.Iterable[GopherEntry]) -> None:
        """Called to render a menu.  Generally called by self.handle()"""
        for direntry in dirlist:
            self.send(self.renderobjinfo(direntry))
        self.send(self.renderdirend())

    def renderdirend(self) -> str:
        """Renders the end of a menu."""
        return ""

    def renderobjinfo(self, entry: GopherEntry) -> str:
        """Renders an object's info according to the protocol.  Returns
        a string.  A gopher0 server, for instance, would return a dir line.
        MUST BE OVERRIDDEN."""
        raise NotImplementedError

    def rendererror(self, msg: str) -> str:
        """Renders an error message.  MUST BE OVERRIDDEN."""
        raise NotImplementedError
