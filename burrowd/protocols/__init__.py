# burrowd -- Gopher server in Python
# module: directory marker for protocols

__all__ = ["base", "rfc1436"]
