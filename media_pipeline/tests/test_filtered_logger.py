from __future__ import annotations

from logger import filtered_logger
from logger.filtered_logger import FilteredLogger, LogChannel
from env_utils import parse_bool_env, parse_float_env


def test_debug_is_silent_unless_channel_enabled(monkeypatch, capsys) -> None:
    for name in ("MEDIA_DEBUG", "INGEST_DEBUG_LOGS", "VIDEO_DEBUG_LOGS", "INFERENCE_DEBUG_LOGS", "RENDER_DEBUG_LOGS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VIDEO_DEBUG_LOGS", "1;")
    logger = FilteredLogger()

    logger.debug(LogChannel.INGEST, "hidden")
    logger.debug(LogChannel.VIDEO, "seek 3")
    logger.warning(LogChannel.RENDER, "first\nsecond")

    assert capsys.readouterr().out.splitlines() == [
        "[DEBUG] [VIDEO] seek 3",
        "[WARN] [RENDER] first",
        "[WARN] [RENDER] second",
    ]


def test_configure_overrides_environment(monkeypatch) -> None:
    monkeypatch.delenv("MEDIA_DEBUG", raising=False)
    logger = FilteredLogger()

    logger.configure(inference_debug=True)

    assert logger.should_log_debug(LogChannel.INFERENCE)
    assert logger.should_log_debug(LogChannel.GLOBAL)
    assert not logger.should_log_debug(LogChannel.RENDER)

    logger.configure(extreme_debug=True)
    assert logger.should_log_debug(LogChannel.RENDER)


def test_env_parsers(monkeypatch) -> None:
    monkeypatch.setenv("FLAG", " 1 ")
    monkeypatch.setenv("TIMEOUT", "2.5;")
    monkeypatch.setenv("BROKEN", "soon")

    assert parse_bool_env("FLAG")
    assert not parse_bool_env("MISSING_FLAG")
    assert parse_float_env("TIMEOUT", 1.0) == 2.5
    assert parse_float_env("BROKEN", 1.0) == 1.0
    assert parse_float_env("MISSING_TIMEOUT", 3.0) == 3.0


def test_module_functions_use_shared_logger(monkeypatch, capsys) -> None:
    shared = FilteredLogger()
    shared.configure(extreme_debug=False, ingest_debug=False, video_debug=False, inference_debug=False, render_debug=False)
    monkeypatch.setattr(filtered_logger, "_shared_logger", shared)

    filtered_logger.configure_logger(render_debug=True)
    filtered_logger.debug(LogChannel.RENDER, "drawn")
    filtered_logger.debug(LogChannel.VIDEO, "hidden")

    assert filtered_logger.should_log_debug(LogChannel.RENDER)
    assert not filtered_logger.should_log_debug(LogChannel.VIDEO)
    assert capsys.readouterr().out.splitlines() == ["[DEBUG] [RENDER] drawn"]
