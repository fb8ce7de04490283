"""End-to-end tests for the tokenauth CLI against a temporary SQLite file."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

import tokenauth.storage.users as users_mod
from tokenauth.cli import main
from tokenauth.db.engine import reset_engine


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SESSION_TIMEOUT", raising=False)
    reset_engine()
    yield
    reset_engine()


def _run(capsys, *argv) -> tuple[str, str]:
    main(list(argv))
    out, err = capsys.readouterr()
    return out.strip(), err.strip()


@pytest.fixture
def alice(capsys):
    _run(capsys, "add-user", "alice", "--role", "admin", "--id", "42")


class TestCli:
    def test_init_db(self, capsys, tmp_path):
        out, _ = _run(capsys, "init-db")
        assert out == "Database initialized"
        assert (tmp_path / "data" / "tokenauth.db").exists()

    def test_add_user(self, capsys):
        out, _ = _run(capsys, "add-user", "bob")
        assert "Created user bob" in out
        assert "role=standard" in out

    def test_add_duplicate_user_fails(self, capsys, alice):
        with pytest.raises(SystemExit) as exc_info:
            main(["add-user", "alice"])
        assert exc_info.value.code == 1

    def test_kubeconfig_token_verifies_in_later_run(self, capsys, alice):
        token, err = _run(capsys, "issue", "42", "--scope", "kubeconfig")
        assert "Expires: " in err
        reset_engine()

        out, _ = _run(capsys, "verify", token)
        assert out == "id=42 username=alice role=1 force_change_password=false"

    def test_default_token_does_not_survive_restart(self, capsys, alice):
        token, _ = _run(capsys, "issue", "42")
        with pytest.raises(SystemExit) as exc_info:
            main(["verify", token])
        assert exc_info.value.code == 1
        assert "not authenticated" in capsys.readouterr().out

    def test_no_expiry(self, capsys, alice):
        _, err = _run(capsys, "issue", "42", "--scope", "kubeconfig", "--no-expiry")
        assert "Expires: never" in err

    def test_invalidate_revokes_existing_tokens(self, capsys, alice, monkeypatch):
        token, _ = _run(capsys, "issue", "42", "--scope", "kubeconfig", "--force-change-password")

        class _Later(datetime):
            @classmethod
            def now(cls, tz=None):
                return datetime.now(tz) + timedelta(minutes=1)

        monkeypatch.setattr(users_mod, "datetime", _Later)
        out, _ = _run(capsys, "invalidate", "42")
        assert "no longer valid" in out

        with pytest.raises(SystemExit):
            main(["verify", token])

    def test_issue_for_unknown_user(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["issue", "999"])
        assert exc_info.value.code == 1
        assert "User not found" in capsys.readouterr().out

    def test_set_session_timeout(self, capsys, alice):
        out, _ = _run(capsys, "set-session-timeout", "90m")
        assert out == "Session timeout set to 90m"

    def test_set_invalid_session_timeout(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["set-session-timeout", "forever"])
        assert exc_info.value.code == 1

    def test_extension_mode(self, capsys, alice):
        out, _ = _run(capsys, "extension-mode", "on")
        assert out == "Extension client mode on"
        _, err = _run(capsys, "issue", "42", "--no-expiry")
        assert "Expires: 21" in err
