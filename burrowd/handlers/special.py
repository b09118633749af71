import typing

from burrowd import gopherentry
from burrowd.handlers.base import BaseHandler


class SpecialHandler(BaseHandler):
    """Last resort for things that are neither files nor directories:
    devices, sockets, FIFOs.  Answers with one fixed info line and
    never opens the object."""

    text = "STUMPED"

    def canhandlerequest(self) -> bool:
        return self.statresult is not None

    def write(self, wfile: typing.IO[bytes]) -> None:
        entry = gopherentry.getinfoentry(self.text)
        wfile.write(self.protocol.renderobjinfo(entry).encode(errors="surrogateescape"))
