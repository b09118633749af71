# burrowd -- Gopher server in Python
# module: directory marker for handlers

__all__ = ["base", "dir", "file", "gophermap", "special", "HandlerMultiplexer"]
