from __future__ import annotations

import pytest

import get_session


def test_login_method_from_env(monkeypatch) -> None:
    monkeypatch.setenv("LOGIN_METHOD", " Phone ")
    assert get_session.choose_login_method() == "phone"


def test_menu_reprompts_on_invalid_choice(monkeypatch) -> None:
    monkeypatch.delenv("LOGIN_METHOD", raising=False)
    answers = iter(["9", "1"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    assert get_session.choose_login_method() == "qr"


def test_menu_exit(monkeypatch) -> None:
    monkeypatch.delenv("LOGIN_METHOD", raising=False)
    monkeypatch.setattr("builtins.input", lambda prompt="": "3")
    with pytest.raises(SystemExit):
        get_session.choose_login_method()
