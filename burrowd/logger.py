import configparser
import sys
import threading
import time
import typing

log: typing.Callable[[str], None]
syslogfunc: typing.Callable[[int, str], None]
priority: int
facility: int

# Every connection thread logs through the same sink.
lock = threading.Lock()


def log_file(message: str) -> None:
    stamp = time.strftime("%Y/%m/%d %H:%M:%S")
    data = f"{stamp} {message}\n".encode(errors="surrogateescape")
    with lock:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


def log_syslog(message: str) -> None:
    # syslog insists on UTF-8; selectors may carry surrogate escapes.
    message_bytes = message.encode(errors="surrogateescape")
    message = message_bytes.decode("utf-8", errors="backslashreplace")
    with lock:
        syslogfunc(priority, message)


def log_none(message: str) -> None:
    pass


def init(config: configparser.ConfigParser) -> None:
    global log, priority, facility, syslogfunc
    logmethod = config.get("logger", "logmethod")
    if logmethod == "syslog":
        import syslog

        priority = getattr(syslog, config.get("logger", "priority"))
        facility = getattr(syslog, config.get("logger", "facility"))
        syslog.openlog("burrowd", syslog.LOG_PID, facility)
        syslogfunc = syslog.syslog
        log = log_syslog
    elif logmethod == "file":
        log = log_file
    else:
        log = log_none


# Usable before init() runs, e.g. while the config is still being read.
log = log_file
