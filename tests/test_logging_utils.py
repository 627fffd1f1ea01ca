import logging

from flow_dash.utils.logging_utils import ensure_dirs, get_logger


def test_get_logger_is_idempotent():
    a = get_logger("flow-dash-test-a")
    b = get_logger("flow-dash-test-a")
    assert a is b
    assert len(a.handlers) == 1


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("FLOW_DASH_LOG_LEVEL", "debug")
    assert get_logger("flow-dash-test-b").level == logging.DEBUG


def test_unknown_level_name_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("FLOW_DASH_LOG_LEVEL", "verbose")
    assert get_logger("flow-dash-test-c").level == logging.INFO


def test_ensure_dirs(tmp_path):
    ensure_dirs(str(tmp_path / "a" / "b"), str(tmp_path / "c"))
    assert (tmp_path / "a" / "b").is_dir() and (tmp_path / "c").is_dir()
