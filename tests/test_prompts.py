import io
import sys

import pytest

from spacecli import styles
from spacecli.prompts import (
    ChooseModel,
    ConfirmModel,
    PromptCancelled,
    TextModel,
    render_choice,
    run_choose,
    run_confirm,
    run_text,
)


def _require_value(value):
    if not value:
        raise ValueError("cannot be empty")


def test_choose_cursor_wraps_both_ways():
    model = ChooseModel(prompt="Pick", choices=["a", "b", "c"])
    assert model.update("down") is False
    assert model.selection() == "b"
    model.update("j")
    assert model.selection() == "c"
    model.update("down")
    assert model.cursor == 0
    model.update("up")
    assert model.cursor == 2
    model.update("k")
    assert model.selection() == "b"


def test_choose_enter_and_cancel():
    model = ChooseModel(prompt="Pick", choices=["a", "b"])
    assert model.update("enter") is True
    assert model.chosen is True
    other = ChooseModel(prompt="Pick", choices=["a"])
    assert other.update("ctrl+c") is True
    assert other.cancelled is True


def test_choose_selection_empty_when_out_of_range():
    model = ChooseModel(prompt="Pick", choices=[])
    model.update("up")
    assert model.selection() == ""


def test_render_choice():
    assert render_choice("a", False) == "  a"
    assert render_choice("a", True) == f"{styles.SELECT_TAG} a"


def test_choose_view_lists_choices_and_final_view():
    model = ChooseModel(prompt="Pick", choices=["a", "b"])
    view = model.view()
    assert view.startswith(f"{styles.QUESTION} {styles.bold('Pick')}  \n")
    assert f"\n{render_choice('a', True)}" in view
    assert f"\n{render_choice('b', False)}" in view
    model.update("down")
    model.update("enter")
    assert model.view() == f"{styles.QUESTION} {styles.bold('Pick')} b\n"


@pytest.mark.parametrize(
    "key, confirmed",
    [("y", True), ("Y", True), ("enter", True), ("n", False), ("N", False)],
)
def test_confirm_keys(key, confirmed):
    model = ConfirmModel(prompt="Sure?")
    assert model.update(key) is True
    assert model.confirm is confirmed
    assert model.quitting is True


def test_confirm_ignores_other_keys_and_views():
    model = ConfirmModel(prompt="Sure?")
    assert model.update("x") is False
    assert model.view() == f"{styles.QUESTION} {styles.bold('Sure?')} {styles.subtle('(Y/n)')}\n"
    model.update("n")
    assert model.view().endswith(f"{styles.subtle('n')}\n")


def test_confirm_cancel():
    model = ConfirmModel(prompt="Sure?")
    model.update("ctrl+c")
    assert model.cancelled is True


def test_text_typing_and_backspace():
    model = TextModel(prompt="Name", placeholder="fallback")
    assert model.value() == "fallback"
    for key in "abc":
        model.update(key)
    model.update("backspace")
    assert model.text == "ab"
    assert model.value() == "ab"


def test_text_validator_blocks_enter():
    model = TextModel(prompt="Name", validator=_require_value)
    assert model.update("enter") is False
    assert model.validation_msg == "❗ Error: cannot be empty"
    assert model.view().endswith("\n❗ Error: cannot be empty")
    model.update("x")
    assert model.update("enter") is True
    assert model.validation_msg == ""


def test_text_validator_receives_placeholder():
    seen = []
    model = TextModel(prompt="Name", placeholder="fallback", validator=seen.append)
    assert model.update("enter") is True
    assert seen == ["fallback"]


def test_text_password_view_hides_text():
    model = TextModel(prompt="Token", password_mode=True)
    for key in "abc":
        model.update(key)
    view = model.view()
    assert "(3 chars)" in view
    assert "abc" not in view
    assert "***" in view


def test_run_choose_reads_keys(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("j\n"))
    assert run_choose("Pick", "a", "b", "c") == "b"
    assert capsys.readouterr().out.endswith(" b\n")


def test_run_choose_arrow_escape(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("\x1b[B\x1b[B\x1b[A\r"))
    assert run_choose("Pick", "a", "b", "c") == "b"


def test_run_confirm(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("n"))
    assert run_confirm("Sure?") is False
    monkeypatch.setattr(sys, "stdin", io.StringIO("\n"))
    assert run_confirm("Sure?") is True


def test_run_confirm_cancelled_at_end_of_input(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    with pytest.raises(PromptCancelled):
        run_confirm("Sure?")


def test_run_text(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("ab\x7fc\n"))
    assert run_text("Name") == "ac"
    monkeypatch.setattr(sys, "stdin", io.StringIO("\n"))
    assert run_text("Name", "fallback") == "fallback"


def test_run_text_cancel(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("ab\x03"))
    with pytest.raises(PromptCancelled):
        run_text("Name", validator=_require_value)