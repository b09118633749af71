import stat
import typing

from burrowd import logger
from burrowd.handlers.base import BaseHandler, copyto


class FileHandler(BaseHandler):
    rfile: typing.Optional[typing.IO[bytes]] = None

    def canhandlerequest(self) -> bool:
        """We can handle the request if it's for a file."""
        return self.statresult is not None and stat.S_ISREG(self.statresult.st_mode)

    def prepare(self) -> None:
        self.rfile = self.vfs.open(self.getselector(), "rb")

    def write(self, wfile: typing.IO[bytes]) -> None:
        try:
            copyto(self.rfile, wfile)
        finally:
            self.close()
        logger.log(f"Served text file '{self.getselector()}'")

    def close(self) -> None:
        if self.rfile is not None:
            self.rfile.close()
            self.rfile = None
