__all__ = ["connect", "dispatcher", "subprocess_client"]


import logging
import sqlite3

from .payload import extract
from .sqlite3executor import run_query, run_exec


_log = logging.getLogger(__name__)


def connect(path):
    # Autocommit: every statement runs in its own implicit transaction.
    return sqlite3.connect(path, isolation_level=None)


def dispatcher(connection):
    return Dispatcher(connection)


def subprocess_client(database, codec="json", timeout=2):
    from .client import RestartingSubprocessBridge
    return RestartingSubprocessBridge(database, codec=codec, timeout=timeout)


class Dispatcher(object):
    """
    Routes an event to the SQL operation it names.

    ``dispatch`` must be called one message at a time: the connection is
    shared by every call and nothing here locks it. No state is kept between
    calls, so each message is parsed and executed afresh.
    """

    def __init__(self, connection):
        self._connection = connection
        self._operations = {
            "query": run_query,
            "exec": run_exec,
        }

    def dispatch(self, event, data):
        operation = self._operations.get(event)
        if operation is None:
            _log.debug("Ignoring unknown event %r", event)
            return None

        sql, params = extract(data)
        return operation(self._connection, sql, params)

    __call__ = dispatch
