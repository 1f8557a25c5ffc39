"""Tests for worklog module."""

import argparse
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from jiramenu.cache import ISSUE_CACHE
from jiramenu.worklog import (
    add_worklog,
    build_worklog_payload,
    format_started,
    parse_started,
    parse_time_spent,
    worklog_command,
)

STARTED = datetime(2026, 3, 1, 9, 5, 7, 123456, tzinfo=timezone.utc)


class TestParseTimeSpent:
    """Tests for parse_time_spent function."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1h", "1h"),
            ("1h30m", "1h 30m"),
            (" 2D  4H ", "2d 4h"),
            ("1.5h", "1.5h"),
            ("1w 2d", "1w 2d"),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_time_spent(text) == expected

    @pytest.mark.parametrize("text", ["", "soon", "90", "1h 30", "1y", "0m"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_time_spent(text)


class TestStarted:
    """Tests for format_started and parse_started."""

    def test_format_utc(self):
        assert format_started(STARTED) == "2026-03-01T09:05:07.123+0000"

    def test_format_converts_to_utc(self):
        helsinki = timezone(timedelta(hours=2))
        dt = datetime(2026, 3, 1, 11, 0, 0, tzinfo=helsinki)

        assert format_started(dt) == "2026-03-01T09:00:00.000+0000"

    def test_format_defaults_to_now(self):
        text = format_started()

        assert text.endswith("+0000")
        assert text.startswith(str(datetime.now(timezone.utc).year))

    def test_parse_with_zone(self):
        assert parse_started("2026-03-01T09:05:07+00:00") == datetime(2026, 3, 1, 9, 5, 7, tzinfo=timezone.utc)

    def test_parse_naive_gets_local_zone(self):
        assert parse_started("2026-03-01 09:00").tzinfo is not None

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_started("last tuesday")


class TestBuildWorklogPayload:
    """Tests for build_worklog_payload function."""

    def test_with_comment(self):
        payload = build_worklog_payload("2h", "Pairing on *login*", STARTED)

        assert payload["timeSpent"] == "2h"
        assert payload["started"] == "2026-03-01T09:05:07.123+0000"
        assert payload["comment"]["type"] == "doc"
        assert payload["comment"]["content"][0]["content"][1]["marks"] == [{"type": "em"}]

    def test_without_comment(self):
        payload = build_worklog_payload("30m", started=STARTED)

        assert "comment" not in payload


class TestAddWorklog:
    """Tests for add_worklog function."""

    def test_posts_worklog(self, mock_jira, respond, sent):
        respond(201, {"id": "20001", "timeSpent": "1h"})
        created = []

        assert add_worklog("PROJ-1", "1h", "Review", STARTED, on_success=created.append) is True

        method, url, payload, _ = sent()
        assert method == "POST"
        assert url == "https://jira.example.com/rest/api/3/issue/PROJ-1/worklog"
        assert payload["timeSpent"] == "1h"
        assert created == [{"id": "20001", "timeSpent": "1h"}]

    def test_invalid_time_sends_nothing(self, mock_jira, capsys):
        assert add_worklog("PROJ-1", "a while") is False

        mock_jira._session.request.assert_not_called()
        assert "Invalid time spent" in capsys.readouterr().err

    def test_failure(self, mock_jira, capsys):
        mock_jira._session.request.side_effect = Exception("Time tracking disabled")

        assert add_worklog("PROJ-1", "1h") is False
        assert "Error logging work on PROJ-1: Time tracking disabled" in capsys.readouterr().err


class TestWorklogCommand:
    """Tests for worklog_command function."""

    @pytest.fixture(autouse=True)
    def site(self):
        with patch("jiramenu.worklog.get_jira_site", return_value="jira.example.com"):
            yield

    def test_default_comment_from_cache(self, mock_jira, sent, capsys):
        """Without --comment the cached summary describes the work."""
        ISSUE_CACHE.remember("PROJ-1", "Fix login")
        args = argparse.Namespace(key="proj-1", time="1h30m", comment=None, started=None)

        worklog_command(args)

        payload = sent()[2]
        assert payload["timeSpent"] == "1h 30m"
        assert payload["comment"]["content"][0]["content"][0]["text"] == "PROJ-1: Fix login"
        assert "Logged 1h 30m on PROJ-1" in capsys.readouterr().out

    def test_explicit_started(self, mock_jira, sent):
        args = argparse.Namespace(key="PROJ-1", time="1h", comment="Done", started="2026-03-01T09:05:07+00:00")

        worklog_command(args)

        assert sent()[2]["started"] == "2026-03-01T09:05:07.000+0000"

    def test_invalid_time_exits(self, mock_jira, capsys):
        args = argparse.Namespace(key="PROJ-1", time="later", comment=None, started=None)

        with pytest.raises(SystemExit) as exc_info:
            worklog_command(args)

        assert exc_info.value.code == 1
        assert "Invalid time spent" in capsys.readouterr().err

    def test_invalid_started_exits(self, mock_jira, capsys):
        args = argparse.Namespace(key="PROJ-1", time="1h", comment=None, started="tomorrow")

        with pytest.raises(SystemExit):
            worklog_command(args)

        assert "Invalid start time 'tomorrow'" in capsys.readouterr().err
