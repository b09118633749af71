productname = "burrowd"
versionstr = "1.0.0"

versionlist = versionstr.split(".")
major = versionlist[0]
minor = versionlist[1]
patch = versionlist[2]
description = "Gophermap-aware Internet Gopher server"
license = "GPLv2"
