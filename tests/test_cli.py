"""Unit tests for flagguard.cli — check-config and audit commands."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

import flagguard.cli as cli_mod


def _write_config(path, database_url="sqlite://", guards=None):
    lines = ["name: polls", "database:", f"  url: {database_url}", "logging:", "  format: text"]
    if guards is not None:
        lines.append("guards:")
        for record, attribute, value in guards:
            lines.append(f"  - record: {record}")
            lines.append(f"    attribute: {attribute}")
            lines.append(f"    guarded_value: {'true' if value else 'false'}")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def _seed(url, model, rows):
    engine = create_engine(url)
    with Session(engine) as session:
        session.add_all([model(**row) for row in rows])
        session.commit()
    engine.dispose()


class TestCLIParsing:
    def test_module_has_expected_commands(self):
        assert hasattr(cli_mod, "main")
        assert hasattr(cli_mod, "cmd_check_config")
        assert hasattr(cli_mod, "cmd_audit")

    def test_no_command_prints_help(self, capsys):
        assert cli_mod.main([]) == 0
        assert "check-config" in capsys.readouterr().out

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit):
            cli_mod.main(["frobnicate"])


class TestCheckConfig:
    def test_lists_guards(self, tmp_path, capsys):
        path = _write_config(
            tmp_path / "flagguard.yaml",
            guards=[("polls", "is_promoted", True), ("polls", "is_active", False)],
        )
        assert cli_mod.main(["--config", path, "check-config"]) == 0

        out = capsys.readouterr().out
        assert "[OK] polls (dev)" in out
        assert "polls.is_promoted unique when true" in out
        assert "polls.is_active unique when false" in out

    def test_no_guards(self, tmp_path, capsys):
        path = _write_config(tmp_path / "flagguard.yaml")
        assert cli_mod.main(["--config", path, "check-config"]) == 0
        assert "No guards configured." in capsys.readouterr().out

    def test_invalid_config(self, tmp_path, capsys):
        path = tmp_path / "flagguard.yaml"
        path.write_text("environment: local\n", encoding="utf-8")
        assert cli_mod.main(["--config", str(path), "check-config"]) == 1
        assert "[ERROR]" in capsys.readouterr().out


class TestAudit:
    def test_all_guards_hold(self, tmp_path, sqlite_file_url, poll_model, capsys):
        _seed(sqlite_file_url, poll_model, [
            {"title": "a", "is_promoted": True},
            {"title": "b", "is_promoted": False},
        ])
        path = _write_config(tmp_path / "flagguard.yaml", sqlite_file_url, [("polls", "is_promoted", True)])

        assert cli_mod.main(["--config", path, "audit"]) == 0

        out = capsys.readouterr().out
        assert "[OK] polls.is_promoted=true: 1 row(s)" in out
        assert "All guards hold." in out

    def test_violation(self, tmp_path, sqlite_file_url, poll_model, capsys):
        _seed(sqlite_file_url, poll_model, [
            {"title": "a", "is_promoted": True},
            {"title": "b", "is_promoted": True},
        ])
        path = _write_config(tmp_path / "flagguard.yaml", sqlite_file_url, [("polls", "is_promoted", True)])

        assert cli_mod.main(["--config", path, "audit"]) == 1
        assert "[VIOLATION] polls.is_promoted=true: 2 rows" in capsys.readouterr().out

    def test_guarded_false(self, tmp_path, sqlite_file_url, poll_model, capsys):
        _seed(sqlite_file_url, poll_model, [
            {"title": "a", "is_active": False},
            {"title": "b", "is_active": False},
            {"title": "c", "is_active": True},
        ])
        path = _write_config(tmp_path / "flagguard.yaml", sqlite_file_url, [("polls", "is_active", False)])

        assert cli_mod.main(["--config", path, "audit"]) == 1
        assert "polls.is_active=false: 2 rows" in capsys.readouterr().out

    def test_missing_table_and_column(self, tmp_path, sqlite_file_url, capsys):
        path = _write_config(
            tmp_path / "flagguard.yaml",
            sqlite_file_url,
            [("nope", "is_promoted", True), ("polls", "is_featured", True)],
        )
        assert cli_mod.main(["--config", path, "audit"]) == 1

        out = capsys.readouterr().out
        assert "table 'nope' not found" in out
        assert "column 'is_featured' not found" in out
        assert "2 problem(s) found." in out

    def test_record_filter_and_url_override(self, tmp_path, sqlite_file_url, poll_model, capsys):
        _seed(sqlite_file_url, poll_model, [{"title": "a", "is_promoted": True}])
        path = _write_config(
            tmp_path / "flagguard.yaml",
            "sqlite:///does-not-matter.db",
            [("polls", "is_promoted", True), ("banners", "is_promoted", True)],
        )

        code = cli_mod.main(["--config", path, "audit", "--database-url", sqlite_file_url, "--record", "polls"])

        out = capsys.readouterr().out
        assert code == 0
        assert "banners" not in out

    def test_nothing_to_audit(self, tmp_path, capsys):
        path = _write_config(tmp_path / "flagguard.yaml")
        assert cli_mod.main(["--config", path, "audit"]) == 0
        assert "No guards to audit." in capsys.readouterr().out
