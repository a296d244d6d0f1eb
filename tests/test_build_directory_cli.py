"""
Tests for the offline staff directory builder.
"""
import json

import pytest

from staff_relay.core.identifiers import derive_identifier
from staff_relay.scripts import build_directory as cli


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture
def source(tmp_path, staff_entries):
    path = tmp_path / "staff.json"
    path.write_text(json.dumps(staff_entries), encoding="utf-8")
    return path


def test_writes_python_module(tmp_path, source, capsys):
    output = tmp_path / "staff.py"

    assert cli.main([str(source), "--secret", "s3cret", "--output", str(output)]) == 0

    namespace: dict = {}
    exec(compile(output.read_text(encoding="utf-8"), str(output), "exec"), namespace)
    staff = namespace["STAFF_BY_ID"]
    assert staff[derive_identifier("Gus", "s3cret")]["email"] == "gus@example.com"
    assert "Generated 2 staff entries" in capsys.readouterr().err


def test_json_to_stdout(source, capsys):
    assert cli.main([str(source), "--secret", "s3cret", "--format", "json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data[derive_identifier("Maria", "s3cret")] == {
        "firstName": "Maria",
        "email": "maria@example.org",
    }


def test_secret_from_environment(source, monkeypatch, capsys):
    monkeypatch.setenv("HASH_SECRET", "from-env")

    assert cli.main([str(source), "--format", "json"]) == 0

    assert derive_identifier("Gus", "from-env") in json.loads(capsys.readouterr().out)


def test_missing_secret_is_usage_error(source, monkeypatch):
    monkeypatch.delenv("HASH_SECRET", raising=False)

    with pytest.raises(SystemExit) as exc_info:
        cli.main([str(source)])
    assert exc_info.value.code == 2


def test_duplicate_fails_without_leaking_addresses(tmp_path, capsys):
    path = tmp_path / "staff.json"
    path.write_text(
        json.dumps([
            {"firstName": "Gus", "email": "gus@example.com"},
            {"firstName": "GUS", "email": "gus.two@example.com"},
        ]),
        encoding="utf-8",
    )
    output = tmp_path / "staff.py"

    assert cli.main([str(path), "--secret", "s3cret", "--output", str(output)]) == 1

    err = capsys.readouterr().err
    assert err.startswith("ERROR:")
    assert "@" not in err
    assert not output.exists()


def test_invalid_email_fails(tmp_path, capsys):
    path = tmp_path / "staff.json"
    path.write_text(json.dumps([{"firstName": "Gus", "email": "gus"}]), encoding="utf-8")

    assert cli.main([str(path), "--secret", "s3cret"]) == 1
    assert "invalid email" in capsys.readouterr().err


@pytest.mark.parametrize("content", ["{not json", '{"firstName": "Gus"}'])
def test_bad_input_file(tmp_path, content):
    path = tmp_path / "staff.json"
    path.write_text(content, encoding="utf-8")

    assert cli.main([str(path), "--secret", "s3cret"]) == 1


def test_missing_input_file(tmp_path):
    assert cli.main([str(tmp_path / "missing.json"), "--secret", "s3cret"]) == 1
