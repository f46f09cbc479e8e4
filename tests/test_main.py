import argparse
import json
from datetime import datetime
from unittest.mock import MagicMock

import psycopg2
import pytest

import main
from mapping.modes import MappingMode
from mapping.rows import record_type
from tests.conftest import describe, make_dict_rows, set_rows


@pytest.fixture
def no_pool(monkeypatch):
    init = MagicMock()
    close = MagicMock()
    monkeypatch.setattr(main, "init_pool", init)
    monkeypatch.setattr(main, "close_pool", close)
    return init, close


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("42", 42),
        ("-3", -3),
        ("2.5", 2.5),
        ("true", True),
        ("FALSE", False),
        ("null", None),
        ("active", "active"),
        ("nan", "nan"),
    ],
)
def test_coerce_arg(raw, expected):
    assert main.coerce_arg(raw) == expected


def test_parse_named():
    assert main.parse_named(["p_user_id=1", "p_note=a=b"]) == {"p_user_id": 1, "p_note": "a=b"}


def test_parse_named_rejects_bad_pair():
    with pytest.raises(argparse.ArgumentTypeError):
        main.parse_named(["no_equals"])


def test_modes_command_needs_no_database(capsys, no_pool):
    assert main.main(["modes"]) == 0
    assert "RealDictCursor" in capsys.readouterr().out
    no_pool[0].assert_not_called()


def test_call_command(monkeypatch, capsys, no_pool):
    repo = MagicMock()
    repo.call.return_value = [{"id": 1, "name": "Alice"}]
    monkeypatch.setattr(main, "FunctionRepository", lambda: repo)

    assert main.main(["call", "get_users_by_status", "active"]) == 0

    repo.call.assert_called_once_with("get_users_by_status", ["active"], MappingMode.DICT)
    assert '"name": "Alice"' in capsys.readouterr().out
    no_pool[0].assert_called_once()
    no_pool[1].assert_called_once()


def test_call_command_named_json(monkeypatch, capsys, no_pool):
    repo = MagicMock()
    repo.call.return_value = {"id": 1}
    monkeypatch.setattr(main, "FunctionRepository", lambda: repo)

    assert main.main(["call", "get_user_profile", "--mode", "json", "--named", "p_user_id=1"]) == 0

    repo.call.assert_called_once_with("get_user_profile", {"p_user_id": 1}, MappingMode.JSON)


def test_call_command_rejects_mixed_params(monkeypatch, no_pool):
    monkeypatch.setattr(main, "FunctionRepository", MagicMock)
    assert main.main(["call", "f", "1", "--named", "a=1"]) == 1


def test_database_error_exits_with_one(monkeypatch, no_pool):
    repo = MagicMock()
    repo.call.side_effect = psycopg2.ProgrammingError("function f() does not exist")
    monkeypatch.setattr(main, "FunctionRepository", lambda: repo)

    assert main.main(["call", "f"]) == 1
    no_pool[1].assert_called_once()


def test_export_command_writes_file(monkeypatch, tmp_path, capsys, no_pool):
    service = MagicMock()
    service.export_csv.return_value.getvalue.return_value = b"id\n1\n"
    monkeypatch.setattr(main, "ExportService", lambda: service)
    target = tmp_path / "out" / "users.csv"

    assert main.main(["export", "get_users_by_status", "active", "--output", str(target)]) == 0

    assert target.read_bytes() == b"id\n1\n"
    service.export_csv.assert_called_once_with("get_users_by_status", ["active"])


def test_init_db_command(monkeypatch, no_pool):
    create, seed = MagicMock(), MagicMock()
    monkeypatch.setattr(main, "create_tables", create)
    monkeypatch.setattr(main, "seed_demo_data", seed)

    assert main.main(["init-db", "--seed"]) == 0
    create.assert_called_once()
    seed.assert_called_once()


def test_render_tuple_mode():
    text = main.render((["id", "name"], [(1, "a")]), MappingMode.TUPLE)
    assert text.splitlines() == ["('id', 'name')", "(1, 'a')"]


def test_render_dict_and_json_modes():
    rows = [{"id": 1, "created_at": datetime(2026, 1, 5, 10)}]
    assert json.loads(main.render(rows, MappingMode.DICT)) == [
        {"id": 1, "created_at": "2026-01-05 10:00:00"}
    ]
    assert json.loads(main.render({"name": "Zoë"}, MappingMode.JSON)) == {"name": "Zoë"}
    assert "Zoë" in main.render({"name": "Zoë"}, MappingMode.JSON)


def test_render_record_mode():
    rec = record_type("UserRow", ["id", "name"])
    text = main.render([rec(1, "Alice")], MappingMode.RECORD)
    assert text == "UserRow(id=1, name='Alice')"


def test_render_hybrid_mode():
    rows = make_dict_rows(["id", "name"], [(1, "Alice"), (2, "Bob")])
    assert main.render(rows, MappingMode.HYBRID).splitlines() == [
        "{'id': 1, 'name': 'Alice'}",
        "{'id': 2, 'name': 'Bob'}",
    ]


def test_invalid_json_text_exits_with_one(fake_db, monkeypatch, no_pool):
    set_rows(fake_db.cursor, [("{not json",)], describe("get_user_profile"))

    assert main.main(["call", "get_user_profile", "1", "--mode", "json"]) == 1
    fake_db.conn.rollback.assert_called_once()


def test_unwritable_export_path_exits_with_one(monkeypatch, tmp_path, no_pool):
    service = MagicMock()
    service.export_csv.return_value.getvalue.return_value = b"id\n"
    monkeypatch.setattr(main, "ExportService", lambda: service)
    blocker = tmp_path / "file"
    blocker.write_text("x")

    assert main.main(["export", "f", "--output", str(blocker / "out.csv")]) == 1
