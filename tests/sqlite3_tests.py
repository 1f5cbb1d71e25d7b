import pytest

import sqlbridge
from sqlbridge.sqlite3executor import run_query, run_exec, bind_parameters
from sqlbridge.errors import ExecutionError, ScanError


@pytest.fixture
def connection():
    connection = sqlbridge.connect(":memory:")
    try:
        yield connection
    finally:
        connection.close()


def test_running_query_returns_rows_in_column_order(connection):
    run_exec(connection, "create table books (title, author)", [])
    run_exec(
        connection,
        "insert into books (title, author) values ($1, $2)",
        ["Dirk Gently's Holistic Detective Agency", "Douglas Adams"],
    )
    run_exec(
        connection,
        "insert into books (title, author) values ($1, $2)",
        ["Orbiting the Giant Hairball", "Gordon MacKenzie"],
    )

    result = run_query(connection, "SELECT author, title FROM books", [])

    assert result == {
        "rows": [
            ["Douglas Adams", "Dirk Gently's Holistic Detective Agency"],
            ["Gordon MacKenzie", "Orbiting the Giant Hairball"],
        ],
    }


def test_query_on_empty_table_returns_empty_rows(connection):
    run_exec(connection, "CREATE TABLE t(x)", [])
    assert run_query(connection, "SELECT x FROM t", []) == {"rows": []}


def test_query_with_no_matching_rows_returns_empty_rows(connection):
    run_exec(connection, "CREATE TABLE t(x)", [])
    run_exec(connection, "INSERT INTO t(x) VALUES ($1)", [1])
    assert run_query(connection, "SELECT x FROM t WHERE x = -1", []) == {"rows": []}


def test_exec_returns_done_regardless_of_rows_affected(connection):
    run_exec(connection, "CREATE TABLE t(x)", [])
    assert run_exec(connection, "DELETE FROM t", []) == {"done": True}


def test_rows_are_returned_in_engine_order(connection):
    run_exec(connection, "CREATE TABLE t(x)", [])
    for value in [1, 2, 3]:
        run_exec(connection, "INSERT INTO t(x) VALUES ($1)", [value])

    assert run_query(connection, "SELECT x FROM t ORDER BY rowid", []) == {"rows": [[1], [2], [3]]}
    assert run_query(connection, "SELECT x FROM t ORDER BY x DESC", []) == {"rows": [[3], [2], [1]]}


def test_numbered_placeholders_bind_by_number_not_by_appearance(connection):
    result = run_query(connection, "SELECT $2, $1", ["first", "second"])
    assert result == {"rows": [["second", "first"]]}


def test_other_numbered_placeholder_forms_bind_positionally(connection):
    result = run_query(connection, "SELECT ?1, :2, @3", [1, 2, 3])
    assert result == {"rows": [[1, 2, 3]]}


def test_bind_parameters_names_values_by_position():
    assert bind_parameters(["a", "b"]) == {"1": "a", "2": "b"}


def test_column_types_are_preserved(connection):
    result = run_query(connection, "SELECT 42, 1.5, 'text', NULL, x'0001'", [])
    assert result == {"rows": [[42, 1.5, "text", None, "AAE="]]}
    assert isinstance(result["rows"][0][0], int)


def test_booleans_bind_as_integers(connection):
    assert run_query(connection, "SELECT $1, $2", [True, False]) == {"rows": [[1, 0]]}


def test_statement_without_result_columns_returns_empty_rows(connection):
    run_exec(connection, "CREATE TABLE t(x)", [])
    assert run_query(connection, "INSERT INTO t(x) VALUES (1)", []) == {"rows": []}
    assert run_query(connection, "SELECT x FROM t", []) == {"rows": [[1]]}


def test_query_results_in_error_if_query_is_empty(connection):
    with pytest.raises(ExecutionError) as error_info:
        run_query(connection, "", [])
    assert str(error_info.value) == "Query is empty"


def test_exec_results_in_error_if_statement_is_blank(connection):
    with pytest.raises(ExecutionError):
        run_exec(connection, "   \n", [])


def test_query_results_in_error_if_query_is_malformed(connection):
    with pytest.raises(ExecutionError) as error_info:
        run_query(connection, "SELEC 1", [])
    assert str(error_info.value).startswith("cannot query: ")
    assert "syntax error" in str(error_info.value)
    assert error_info.value.kind == "execution"


def test_exec_results_in_error_if_table_does_not_exist(connection):
    with pytest.raises(ExecutionError) as error_info:
        run_exec(connection, "INSERT INTO books VALUES (1)", [])
    assert str(error_info.value) == "cannot exec: no such table: books"


def test_connection_is_usable_after_failed_statement(connection):
    with pytest.raises(ExecutionError):
        run_exec(connection, "SELEC 1", [])
    run_exec(connection, "CREATE TABLE t(x)", [])
    run_exec(connection, "INSERT INTO t(x) VALUES ($1)", [7])
    assert run_query(connection, "SELECT x FROM t", []) == {"rows": [[7]]}


def test_constraint_violation_is_an_execution_error(connection):
    run_exec(connection, "CREATE TABLE t(x UNIQUE)", [])
    run_exec(connection, "INSERT INTO t(x) VALUES ($1)", [1])
    with pytest.raises(ExecutionError):
        run_exec(connection, "INSERT INTO t(x) VALUES ($1)", [1])
    assert run_query(connection, "SELECT x FROM t", []) == {"rows": [[1]]}


def test_missing_parameter_is_an_execution_error(connection):
    with pytest.raises(ExecutionError):
        run_query(connection, "SELECT $1, $2", [1])


def test_unsupported_parameter_type_is_an_execution_error(connection):
    with pytest.raises(ExecutionError):
        run_query(connection, "SELECT $1", [[1, 2]])


def test_integer_too_large_for_sqlite_is_an_execution_error(connection):
    with pytest.raises(ExecutionError):
        run_query(connection, "SELECT $1", [2 ** 70])


def test_multiple_statements_are_rejected(connection):
    with pytest.raises(ExecutionError):
        run_exec(connection, "CREATE TABLE a(x); CREATE TABLE b(x)", [])


def test_failure_while_reading_rows_discards_partial_results(connection):
    def explode(value):
        if value == 2:
            raise ValueError("boom")
        return value

    connection.create_function("explode", 1, explode)
    run_exec(connection, "CREATE TABLE t(x)", [])
    for value in [1, 2, 3]:
        run_exec(connection, "INSERT INTO t(x) VALUES ($1)", [value])

    with pytest.raises(ScanError) as error_info:
        run_query(connection, "SELECT explode(x) FROM t", [])
    assert str(error_info.value).startswith("error scanning row: ")
    assert error_info.value.cause is not None
