from __future__ import annotations

import configparser
import typing

from burrowd import GopherExceptions
from burrowd.handlers.base import BaseHandler, VFS_Real
from burrowd.handlers.dir import DirHandler
from burrowd.handlers.file import FileHandler
from burrowd.handlers.gophermap import GophermapHandler
from burrowd.handlers.special import SpecialHandler

if typing.TYPE_CHECKING:
    from burrowd.protocols.base import BaseGopherProtocol


# Tried in order; the first one whose canhandlerequest() agrees wins.  The
# gophermap handler must come before the plain directory handler.
handlers: typing.List[typing.Type[BaseHandler]] = [
    GophermapHandler,
    DirHandler,
    FileHandler,
    SpecialHandler,
]


def getHandler(
    selector: str,
    searchrequest: typing.Optional[str],
    protocol: BaseGopherProtocol,
    config: configparser.ConfigParser,
    vfs: VFS_Real,
    handlerlist: typing.Optional[typing.List[typing.Type[BaseHandler]]] = None,
) -> BaseHandler:
    """Called without handlerlist specified, uses the default list above.

    Raises SelectorOutsideRoot for selectors that escape the document
    root, FileNotFound for missing or forbidden ones, and lets any other
    OSError from stat() through."""
    if handlerlist is None:
        handlerlist = handlers

    try:
        statresult = vfs.stat(selector)
    except OSError as e:
        notfound = GopherExceptions.fromoserror(e, selector, protocol)
        if notfound is not None:
            raise notfound from e
        raise

    for handler in handlerlist:
        htry = handler(selector, searchrequest, protocol, config, statresult, vfs)
        if htry.canhandlerequest():
            return htry

    raise GopherExceptions.FileNotFound(selector, "no handler found", protocol)
