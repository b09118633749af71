# burrowd -- Gopher server in Python
# module: base handler code
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
import os
import os.path
import typing

from burrowd import GopherExceptions

if typing.TYPE_CHECKING:
    from burrowd.gopherentry import GopherEntry
    from burrowd.protocols.base import BaseGopherProtocol


BUFSIZE = 4096


class VFS_Real:
    """Maps selectors onto the real filesystem below a document root.

    Every method that touches the filesystem goes through getfspath(),
    so a selector that would escape the root is refused before any
    system call is made with it."""

    def __init__(self, root: str):
        self.root = os.path.normpath(os.path.abspath(root))

    def stat(self, selector: str) -> os.stat_result:
        return os.stat(self.getfspath(selector))

    def isfile(self, selector: str) -> bool:
        return os.path.isfile(self.getfspath(selector))

    def open(self, selector: str, mode: str = "rb") -> typing.IO:
        return open(self.getfspath(selector), mode)

    def listdir(self, selector: str) -> typing.List[str]:
        return os.listdir(self.getfspath(selector))

    def isunderroot(self, fspath: str) -> bool:
        """True if fspath is the root itself or lies below it."""
        if fspath == self.root:
            return True
        return fspath.startswith(self.root.rstrip("/") + "/")

    def getfspath(self, selector: str) -> str:
        """Gets the filesystem path corresponding to the selector."""
        fspath = os.path.normpath(self.root.rstrip("/") + "/" + selector.lstrip("/"))
        if "\0" in fspath or not self.isunderroot(fspath):
            raise GopherExceptions.SelectorOutsideRoot(selector, fspath)
        return fspath


def copyto(rfile: typing.IO[bytes], fd: typing.IO[bytes]) -> int:
    """Copies rfile verbatim to fd.  Returns the byte count."""
    total = 0
    while True:
        data = rfile.read(BUFSIZE)
        if not len(data):
            break
        written = fd.write(data)
        if written is not None and written != len(data):
            raise GopherExceptions.ShortWrite(len(data), written)
        total += len(data)
    return total


class BaseHandler:
    """Skeleton handler -- includes commonly-used routines."""

    def __init__(
        self,
        selector: str,
        searchrequest: typing.Optional[str],
        protocol: BaseGopherProtocol,
        config: configparser.ConfigParser,
        statresult: typing.Optional[os.stat_result],
        vfs: VFS_Real,
    ):
        """Parameters are:
        selector -- requested selector.  The selector must always start
        with a slash and never end with a slash UNLESS it is a one-char
        selector that contains only a slash.  This is handled by the
        protocol.

        statresult -- os.stat() of the selector, already taken by the
        multiplexer.

        config -- config object."""
        self.selector = selector
        self.searchrequest = searchrequest
        self.protocol = protocol
        self.config = config
        self.statresult = statresult
        self.vfs = vfs

        self.selectorbase = selector
        if self.selectorbase == "/":
            self.selectorbase = ""  # Avoid dup slashes

    def canhandlerequest(self) -> bool:
        """Decides whether or not a given request is valid for this
        handler.  Should be overridden by all subclasses."""
        return False

    def getselector(self) -> str:
        """Returns the selector we are handling."""
        return self.selector

    ## The rest are the publically-exposed interface -- the ones
    ## called by the protocol.

    def prepare(self) -> None:
        """Prepares for a write.  Ie, opens a file.  This is
        used so that the protocols can report an error before
        transmitting anything.  Must always be called before write
        or getdirlist."""
        pass

    def isdir(self) -> bool:
        """Returns true if this handler produces a menu; false if it
        writes raw data."""
        return False

    def write(self, wfile: typing.IO[bytes]) -> None:
        """Writes out the request if isdir() returns false.  Should be
        overridden by non-menu handlers."""
        if self.isdir():
            raise Exception("Attempt to use write for a directory")

    def getdirlist(self) -> typing.Iterable[GopherEntry]:
        """Returns an iterable of the gopherentry objects making up the
        menu.  Valid only if self.isdir() returns true."""
        if not self.isdir():
            raise Exception("Attempt to use getdirlist for a file.")
        return []

    def close(self) -> None:
        """Releases whatever prepare() opened."""
        pass
