import argparse
import configparser
import os
import os.path
import socket
import sys
import typing

import burrowd.server
import burrowd.version
from burrowd import GopherExceptions, logger, sighandlers

DEFAULTS = {
    "burrowd": {
        "port": "70",
        "servertype": "ThreadingTCPServer",
        "tracebacks": "no",
        "accept_backoff_base": "0.01",
        "accept_backoff_max": "1.0",
    },
    "logger": {
        "logmethod": "file",
        "priority": "LOG_NOTICE",
        "facility": "LOG_DAEMON",
    },
    "handlers.dir.DirHandler": {
        "ignorepatt": "",
    },
}


def defaulthostname() -> str:
    try:
        hostname = socket.gethostname()
    except OSError:
        hostname = ""
    if not hostname:
        sys.stderr.write("could not determine hostname, defaulting to localhost\n")
        hostname = "localhost"
    return hostname


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="burrowd", description=burrowd.version.description
    )
    parser.add_argument(
        "--hostname",
        help="hostname to bind to and advertise in menus "
        "(default: this machine's hostname)",
    )
    parser.add_argument(
        "--port", type=int, help="port to listen on (default: 70)"
    )
    parser.add_argument("--config", metavar="FILE", help="configuration file")
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s " + burrowd.version.versionstr,
    )
    return parser


def init_config(filename: typing.Optional[str] = None) -> configparser.ConfigParser:
    config = configparser.ConfigParser()
    config.read_dict(DEFAULTS)

    if filename is not None:
        if not (os.path.isfile(filename) and os.access(filename, os.R_OK)):
            raise Exception(
                f"Could NOT access config file {filename}\n"
                f"Please specify config file with --config\n"
            )
        config.read(filename)

    # The document root is where we were started unless told otherwise.
    if config.has_option("burrowd", "root"):
        root = config.get("burrowd", "root")
    else:
        root = os.getcwd()
    config.set("burrowd", "root", os.path.abspath(root))
    return config


def init_arguments(config: configparser.ConfigParser, args: argparse.Namespace) -> None:
    """Command-line flags win over the config file."""
    if args.hostname is not None:
        config.set("burrowd", "servername", args.hostname)
    elif not config.has_option("burrowd", "servername"):
        config.set("burrowd", "servername", defaulthostname())

    if args.port is not None:
        config.set("burrowd", "port", str(args.port))


def init_logger(config: configparser.ConfigParser, filename: typing.Optional[str]) -> None:
    logger.init(config)
    if filename:
        logger.log(f"burrowd starting, using configuration file {filename}")
    else:
        logger.log("burrowd starting with built-in configuration")


def init_exceptions(config: configparser.ConfigParser) -> None:
    GopherExceptions.init(config.getboolean("burrowd", "tracebacks"))


def get_server(config: configparser.ConfigParser) -> burrowd.server.BaseServer:
    # Pick up the server type from the config.
    server_class: typing.Type[burrowd.server.BaseServer]

    server_type = config.get("burrowd", "servertype")
    if server_type == "ForkingTCPServer":
        server_class = burrowd.server.ForkingTCPServer
    elif server_type == "ThreadingTCPServer":
        server_class = burrowd.server.ThreadingTCPServer
    else:
        raise RuntimeError(f"Invalid servertype option: {server_type}")

    # Instantiate a server.  Has to be done before the security so we can
    # get a privileged port if necessary.
    if config.has_option("burrowd", "interface"):
        interface = config.get("burrowd", "interface")
    else:
        interface = config.get("burrowd", "servername", fallback="")

    port = config.getint("burrowd", "port")
    address = (interface, port)

    try:
        server = server_class(config, address, burrowd.server.GopherRequestHandler)
    except Exception as e:
        GopherExceptions.log(e, None, None)
        logger.log("Application startup NOT successful!")
        raise

    return server


def init_security(config: configparser.ConfigParser) -> None:
    uid = None
    gid = None

    if config.has_option("burrowd", "setuid"):
        import pwd

        uid = pwd.getpwnam(config.get("burrowd", "setuid"))[2]

    if config.has_option("burrowd", "setgid"):
        import grp

        gid = grp.getgrnam(config.get("burrowd", "setgid"))[2]

    if uid is not None or gid is not None:
        os.setgroups(())
        logger.log("Supplemental group list cleared.")

    if gid is not None:
        os.setregid(gid, gid)
        logger.log(f"Switched to group {gid}")

    if uid is not None:
        os.setreuid(uid, uid)
        logger.log(f"Switched to uid {uid}")


def init_pidfile(config: configparser.ConfigParser) -> None:
    if config.has_option("burrowd", "pidfile"):
        pidfile = config.get("burrowd", "pidfile")

        with open(pidfile, "w") as fd:
            fd.write("%d\n" % os.getpid())


def init_signal_handlers() -> None:
    sighandlers.setsighuphandler()
    sighandlers.setsigtermhandler()


def initialize(
    argv: typing.Optional[typing.Sequence[str]] = None,
) -> burrowd.server.BaseServer:
    args = get_parser().parse_args(argv)
    config = init_config(args.config)
    init_arguments(config, args)

    init_logger(config, args.config)
    init_exceptions(config)
    server = get_server(config)
    init_pidfile(config)
    init_signal_handlers()
    init_security(config)

    root = config.get("burrowd", "root")
    logger.log("listening on %s:%d" % server.server_address[:2])
    logger.log(f"Running.  Root is '{root}'")
    return server


def main(argv: typing.Optional[typing.Sequence[str]] = None) -> None:
    server = initialize(argv)
    try:
        server.serve_forever()
    finally:
        server.server_close()
