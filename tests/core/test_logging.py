import logging

from src.time_tracker.time_tracker.core.logging import configure_logging, get_logger, resolve_level


def test_level_names_are_case_insensitive():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    assert resolve_level("ERROR") == logging.ERROR


def test_unknown_or_missing_level_means_info():
    assert resolve_level("chatty") == logging.INFO
    assert resolve_level(None) == logging.INFO
    assert resolve_level(logging.DEBUG) == logging.DEBUG


def test_lowercase_level_configures_and_logs(capsys):
    configure_logging("debug")

    get_logger("tests").debug("detail_event")
    get_logger("tests").info("tracking_event", user_id="u-1")

    out = capsys.readouterr().out
    assert "tracking_event" in out
    assert '"level": "debug"' in out
