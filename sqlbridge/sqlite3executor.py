import sqlite3

from . import values
from .errors import BridgeError, ExecutionError, ColumnError, ScanError


# Errors the driver raises while binding or running a statement, besides its
# own hierarchy: sqlite3.Warning for several statements before Python 3.11,
# integers wider than 64 bits, null characters and lone surrogates in strings.
_DriverErrors = (sqlite3.Error, sqlite3.Warning, OverflowError, ValueError)


def run_query(connection, sql, params):
    cursor = _execute(connection, sql, params, "cannot query")
    try:
        try:
            column_names = [
                column[0]
                for column in (cursor.description or ())
            ]
        except _DriverErrors as error:
            raise ColumnError("cannot get columns", error) from error

        rows = []
        try:
            for row in cursor:
                row_values = [None] * len(column_names)
                for index, value in enumerate(row):
                    row_values[index] = values.from_column(value)
                rows.append(row_values)
        except (BridgeError, ) + _DriverErrors as error:
            raise ScanError("error scanning row", error) from error

        return {"rows": rows}
    finally:
        cursor.close()


def run_exec(connection, sql, params):
    cursor = _execute(connection, sql, params, "cannot exec")
    cursor.close()
    return {"done": True}


def _execute(connection, sql, params, context):
    if not sql.strip():
        raise ExecutionError("Query is empty")

    cursor = connection.cursor()
    try:
        cursor.execute(sql, bind_parameters(params))
    except _DriverErrors as error:
        cursor.close()
        raise ExecutionError(context, error) from error
    return cursor


def bind_parameters(params):
    # SQLite names the placeholder $1 "1" (likewise :1, @1 and ?1), so
    # binding by name pins $N to params[N - 1] whatever order the
    # placeholders appear in.
    return dict(
        (str(index + 1), value)
        for index, value in enumerate(params)
    )
