import os
import signal
import sys

from burrowd import logger

pid = None


def huphandler(signum, frame):
    logger.log("SIGHUP (%d) received; terminating process" % signum)
    os._exit(5)  # So we don't raise SystemExit


def termhandler(signum, frame):
    if os.getpid() == pid:
        logger.log("SIGTERM (%d) received; shutting down" % signum)
        sys.exit(6)
    else:  # A forked connection handler.
        logger.log("SIGTERM (%d) received in child; terminating this process" % signum)
        os._exit(7)


def setsighuphandler():
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, huphandler)


def setsigtermhandler():
    global pid
    pid = os.getpid()
    signal.signal(signal.SIGTERM, termhandler)
