import argparse
import logging
import os
import sqlite3
import sys

import sqlbridge
from sqlbridge import transport
from sqlbridge.errors import HandshakeError


_log = logging.getLogger("sqlbridge.process")


def main(argv=None):
    args = _parse_args(argv)
    configure_logging(args.log_level)

    _log.info("Starting SQLite bridge")
    try:
        connection = sqlbridge.connect(args.database)
    except sqlite3.Error as error:
        _log.error("Cannot open database file %s: %s", args.database, error)
        return 1

    try:
        codec = transport.get_codec(args.codec)
        transport.run_loop(
            sqlbridge.dispatcher(connection),
            input_stream=sys.stdin.buffer,
            output_stream=sys.stdout.buffer,
            codec=codec,
        )
    except HandshakeError as error:
        _log.error("%s", error)
        return 1
    finally:
        connection.close()

    return 0


def configure_logging(level):
    # stdout carries the protocol, so logs go to stderr
    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
    root.setLevel(level)


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="sqlbridge",
        description="Serve SQL queries against a SQLite database over stdin/stdout.",
    )
    parser.add_argument("database", help="Path to the SQLite database file.")
    parser.add_argument(
        "--codec",
        choices=transport.codec_names(),
        default=os.environ.get("SQLBRIDGE_CODEC", "json"),
        help="Wire format of messages and replies.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.environ.get("SQLBRIDGE_LOG_LEVEL", "INFO"),
        help="Logging level for messages written to stderr.",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    sys.exit(main())
