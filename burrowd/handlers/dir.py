import re
import stat
import typing

from burrowd import gopherentry, logger
from burrowd.handlers.base import BaseHandler

# Characters a menu line cannot carry inside a field.
UNSAFE = re.compile("[\t\r\n]")


class DirHandler(BaseHandler):
    files: typing.List[str]

    def canhandlerequest(self) -> bool:
        """We can handle the request if it's for a directory."""
        return self.statresult is not None and stat.S_ISDIR(self.statresult.st_mode)

    def prep_initfiles(self) -> None:
        """Initialize the list of files.  Ignore the files we're supposed to."""
        self.files = []
        dirfiles = self.vfs.listdir(self.getselector())
        ignorepatt = self.config.get(
            "handlers.dir.DirHandler", "ignorepatt", fallback=""
        )
        for file in dirfiles:
            if self.prep_initfiles_canaddfile(
                ignorepatt, self.selectorbase + "/" + file, file
            ):
                self.files.append(file)

    def prep_initfiles_canaddfile(
        self, ignorepatt: str, pattern: str, file: str
    ) -> bool:
        if not ignorepatt:
            return True
        return not re.search(ignorepatt, pattern)

    def prepare(self) -> None:
        # Enumerate up front: a directory we cannot read is reported
        # before the first menu line goes out.
        self.prep_initfiles()
        self.files.sort()

    def isdir(self) -> bool:
        return True

    def getdirlist(self) -> typing.Iterator[gopherentry.GopherEntry]:
        for file in self.files:
            if UNSAFE.search(file):
                yield gopherentry.getinfoentry(UNSAFE.sub("?", file))
                continue
            selector = self.selectorbase + "/" + file
            try:
                statval = self.vfs.stat(selector)
            except OSError:
                statval = None
            entry = gopherentry.GopherEntry(selector)
            entry.populatefromfs(file, statval)
            yield entry
        logger.log(f"Served directory '{self.getselector()}'")
