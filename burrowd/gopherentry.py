# burrowd -- Gopher server in Python
# module: Generic gopher entry object
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

import os
import stat
from typing import Optional

# Selector carried by info lines; clients never follow it.
INFO_SELECTOR = "F"


class GopherEntry:
    """The entry object for Gopher.  It holds information about a single
    menu line.  A host or port left as None means "this server"; the
    protocol fills those in from the advertised host and port when the
    line is rendered."""

    def __init__(self, selector: str):
        self.selector = selector  # Gopher path to the object
        self.type = None  # Gopher0 type char
        self.name = None  # Menu name
        self.host = None  # Hostname
        self.port = None  # Port number (an int)

    def populatefromfs(self, name: str, statval: Optional[os.stat_result]) -> None:
        """Fills in the type and name from a stat result.  statval may be
        None for things that could not be stat'ed, such as dangling
        symlinks; those become info lines."""
        self.name = name
        if statval is None:
            self.type = "i"
        elif stat.S_ISDIR(statval.st_mode):
            self.type = "1"
        elif stat.S_ISREG(statval.st_mode):
            self.type = "0"
        else:
            self.type = "i"

        if self.type == "i":
            self.selector = INFO_SELECTOR

    def getselector(self, default: Optional[str] = None) -> Optional[str]:
        if self.selector is None:
            return default
        return self.selector

    def gettype(self, default: Optional[str] = None) -> Optional[str]:
        if self.type is None:
            return default
        return self.type

    def getname(self, default: Optional[str] = None) -> Optional[str]:
        if self.name is None:
            return default
        return self.name

    def gethost(self, default: Optional[str] = None) -> Optional[str]:
        if self.host is None:
            return default
        return self.host

    def getport(self, default: Optional[int] = None) -> Optional[int]:
        if self.port is None:
            return default
        return self.port

    def __repr__(self):
        return "<GopherEntry %r %r %r %r %r>" % (
            self.type,
            self.name,
            self.selector,
            self.host,
            self.port,
        )


def getinfoentry(text: str) -> GopherEntry:
    entry = GopherEntry(INFO_SELECTOR)
    entry.name = text
    entry.type = "i"
    return entry
