#!/usr/bin/env python3
import setuptools

setuptools.setup(
    name="burrowd",
    version="1.0.0",
    description="Gophermap-aware Internet Gopher server",
    python_requires=">=3.7",
    packages=["burrowd", "burrowd.handlers", "burrowd.protocols"],
    scripts=["bin/burrowd"],
    license="GPLv2",
)
