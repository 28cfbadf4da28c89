import argparse
import logging

from prompt_playlist.logging_utils import (
    RunIdFilter,
    RunSummary,
    add_logging_args,
    format_count,
    get_run_id,
    redact,
    resolve_log_level,
    run_context,
    truncate_list,
)


def test_redact_api_keys():
    text = "api_key=sk-abcdef1234567890 and Authorization: Bearer XYZTOKEN"
    redacted = redact(text)
    assert "sk-abcdef1234567890" not in redacted
    assert "XYZTOKEN" not in redacted


def test_redact_bare_openai_key_in_message():
    redacted = redact("Incorrect API key provided: sk-proj-1234567890abcdef")
    assert "1234567890abcdef" not in redacted


def test_redact_custom_keys():
    assert "hunter2" not in redact({"db_password": "hunter2"}, keys=["db_password"])
    assert redact(None) == "None"


def test_format_count_and_truncate_list():
    assert format_count(1, "track") == "1 track"
    assert format_count(1200, "track") == "1,200 tracks"
    assert truncate_list([]) == "(none)"
    assert truncate_list(["a", "b", "c", "d", "e"], max_items=2) == "a, b (+3 more)"


def test_run_context_scopes_run_id():
    assert get_run_id() is None
    with run_context("abc123") as run_id:
        assert run_id == "abc123"
        assert get_run_id() == "abc123"
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        RunIdFilter().filter(record)
        assert record.run_id == "abc123"
    assert get_run_id() is None


def test_run_context_generates_id():
    with run_context() as run_id:
        assert run_id and len(run_id) == 8


def test_logging_args():
    parser = argparse.ArgumentParser()
    add_logging_args(parser)
    assert resolve_log_level(parser.parse_args([])) == "INFO"
    assert resolve_log_level(parser.parse_args(["--debug"])) == "DEBUG"
    assert resolve_log_level(parser.parse_args(["--quiet"])) == "WARNING"
    assert resolve_log_level(parser.parse_args(["--log-level", "ERROR"])) == "ERROR"


def test_run_summary_logs_metrics(caplog):
    logger = logging.getLogger("test.summary")
    summary = RunSummary("Playlist generation", logger)
    summary.add("tracks_delivered", 9)
    summary.increment("llm_calls")
    summary.increment("llm_calls")
    summary.set_timing(1.5)
    with caplog.at_level(logging.INFO, logger="test.summary"):
        summary.log()
    assert "PLAYLIST GENERATION SUMMARY" in caplog.text
    assert "Tracks Delivered: 9" in caplog.text
    assert "Llm Calls: 2" in caplog.text
    assert "Total Time: 1.5s" in caplog.text
