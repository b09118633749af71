from burrowd.gopherentry import GopherEntry
from burrowd.protocols.base import BaseGopherProtocol

CRLF = "\r\n"


class GopherProtocol(BaseGopherProtocol):
    """Implementation of basic protocol.  Will handle every query."""

    def renderobjinfo(self, entry: GopherEntry) -> str:
        serverconfig = self.server.serverconfig
        return (
            entry.gettype("0")
            + entry.getname("")
            + "\t"
            + entry.getselector("")
            + "\t"
            + entry.gethost(default=serverconfig.hostname)
            + "\t"
            + str(entry.getport(default=serverconfig.port))
            + CRLF
        )

    def renderdirend(self) -> str:
        return "." + CRLF

    def rendererror(self, msg: str) -> str:
        return "3" + msg + "\terror\thost\t0" + CRLF
