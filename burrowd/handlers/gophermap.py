import stat
import typing

from burrowd import gopherentry, logger
from burrowd.handlers.base import BaseHandler

MAPNAME = "gophermap"
MAXLINE = 512


class GophermapHandler(BaseHandler):
    """Serves a directory from its hand-written gophermap file instead of
    listing it.  Each line of the file is either plain text, shown as an
    info line, or a tab-separated link:

        <type><display>[TAB<selector>[TAB<host>[TAB<port>]]]

    Missing fields default to a selector relative to this directory and
    to this server's own host and port."""

    rfile: typing.Optional[typing.IO[bytes]] = None

    def canhandlerequest(self) -> bool:
        """We can handle the request if it's for a directory AND
        the directory has a gophermap file."""
        return (
            self.statresult is not None
            and stat.S_ISDIR(self.statresult.st_mode)
            and self.vfs.isfile(self.getmapselector())
        )

    def getmapselector(self) -> str:
        return self.selectorbase + "/" + MAPNAME

    def prepare(self) -> None:
        self.rfile = self.vfs.open(self.getmapselector(), "rb")

    def isdir(self) -> bool:
        return True

    def getdirlist(self) -> typing.Iterator[gopherentry.GopherEntry]:
        try:
            while True:
                line = self.readmapline()
                if not line:
                    break
                yield self.parseline(
                    line.rstrip(b"\r\n").decode(errors="surrogateescape")
                )
        finally:
            self.close()
        logger.log(f"Served gophermapped directory '{self.getselector()}'")

    def readmapline(self) -> bytes:
        """Reads one line of the map.  Overlong lines come back in MAXLINE
        pieces, each its own line."""
        line = self.rfile.readline(MAXLINE)
        if len(line) == MAXLINE and not line.endswith(b"\n"):
            # A line ending just past the bound still belongs to this line.
            if not line.endswith(b"\r") and self.rfile.peek(1)[:1] == b"\r":
                self.rfile.read(1)
            if self.rfile.peek(1)[:1] == b"\n":
                self.rfile.read(1)
        return line

    def parseline(self, line: str) -> gopherentry.GopherEntry:
        if "\t" not in line:  # Info line
            return gopherentry.getinfoentry(line)

        args = line.split("\t", 3)
        itemtype, name = args[0][:1] or "i", args[0][1:]

        if len(args) < 2 or not len(args[1]):
            selector = self.selectorbase + "/" + name
        elif args[1].startswith("/") or args[1].startswith("URL:"):
            selector = args[1]
        else:  # Relative link
            selector = self.selectorbase + "/" + args[1]

        entry = gopherentry.GopherEntry(selector)
        entry.type = itemtype
        entry.name = name

        if len(args) >= 3 and len(args[2]):
            entry.host = args[2]

        if len(args) >= 4 and len(args[3].strip()):
            try:
                entry.port = int(args[3])
            except ValueError:
                logger.log(f"Ignoring bad port {args[3]!r} in {self.getmapselector()}")

        return entry

    def close(self) -> None:
        if self.rfile is not None:
            self.rfile.close()
            self.rfile = None
