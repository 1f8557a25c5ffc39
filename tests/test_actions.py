"""Tests for actions module."""

from unittest.mock import MagicMock, patch

import pytest

from jiramenu.actions import (
    assign_action,
    bulk_menu,
    comment_menu,
    delete_comment_action,
    issue_menu,
    issue_title,
    labels_action,
    transition_menu,
    watch_action,
    worklog_menu,
)
from jiramenu.cache import ISSUE_CACHE

RAW_TRANSITIONS = [
    {"id": "11", "name": "Start Progress", "to": {"name": "In Progress"}},
    {"id": "31", "name": "Resolve", "to": {"name": "Done"}, "fields": {"resolution": {"required": True}}},
]

ISSUE_AFTER = {
    "key": "PROJ-1",
    "fields": {"summary": "Fix login", "status": {"name": "Done"}, "assignee": {"displayName": "Ann"}},
}


def reader(*answers):
    it = iter(answers)

    def _read(prompt=""):
        try:
            return next(it)
        except StopIteration:
            raise EOFError

    return _read


def named(*names):
    items = []
    for name in names:
        item = MagicMock()
        item.name = name
        items.append(item)
    return items


class TestIssueTitle:
    """Tests for issue_title function."""

    def test_uses_cache(self):
        ISSUE_CACHE.remember("PROJ-1", "Fix login", status="To Do")

        assert issue_title("PROJ-1") == "PROJ-1 [To Do] Fix login"

    def test_unknown_key(self):
        assert issue_title("PROJ-9") == "PROJ-9"


class TestTransitionMenu:
    """Tests for transition_menu function."""

    def test_one_action_per_transition(self, mock_jira):
        mock_jira.transitions.return_value = RAW_TRANSITIONS

        menu = transition_menu("PROJ-1")

        assert [(a.key, a.label) for a in menu.actions] == [
            ("1", "Start Progress → In Progress"),
            ("2", "Resolve → Done"),
        ]
        assert menu.actions[1].requires == ["resolution"]
        mock_jira.resolutions.assert_not_called()

    def test_resolution_required_then_transition(self, mock_jira, respond, sent, capsys):
        """Transitions asking for a resolution wait until one is picked."""
        mock_jira.transitions.return_value = RAW_TRANSITIONS
        mock_jira.resolutions.return_value = named("Fixed", "Won't Do")
        respond(200, ISSUE_AFTER)

        result = transition_menu("PROJ-1").run(reader("2", "-r", "1", "2"))

        assert result is True
        method, url, payload, _ = sent(0)
        assert (method, url.rsplit("/api/3/", 1)[1]) == ("POST", "issue/PROJ-1/transitions")
        assert payload == {"transition": {"id": "31"}, "fields": {"resolution": {"name": "Fixed"}}}
        captured = capsys.readouterr()
        assert "Set Resolution first" in captured.err
        assert "Transitioned PROJ-1 to Done" in captured.out

    def test_resolution_only_sent_where_screen_has_it(self, mock_jira, respond, sent):
        """A picked resolution is left out of transitions without a resolution field."""
        mock_jira.transitions.return_value = RAW_TRANSITIONS
        mock_jira.resolutions.return_value = named("Fixed", "Won't Do")
        respond(200, ISSUE_AFTER)

        assert transition_menu("PROJ-1").run(reader("-r", "1", "1")) is True
        assert sent(0)[2] == {"transition": {"id": "11"}}

    def test_success_refreshes_cache(self, mock_jira, respond):
        mock_jira.transitions.return_value = RAW_TRANSITIONS
        ISSUE_CACHE.remember("PROJ-1", "Fix login", status="To Do")
        respond(200, ISSUE_AFTER)

        transition_menu("PROJ-1").run(reader("1"))

        assert ISSUE_CACHE.get("PROJ-1").status == "Done"

    def test_failure_keeps_cache(self, mock_jira):
        mock_jira.transitions.return_value = RAW_TRANSITIONS
        mock_jira._session.request.side_effect = Exception("409 Conflict")
        ISSUE_CACHE.remember("PROJ-1", "Fix login", status="To Do")

        assert transition_menu("PROJ-1").run(reader("1")) is False
        assert ISSUE_CACHE.get("PROJ-1").status == "To Do"
        assert mock_jira._session.request.call_count == 1


class TestCommentMenu:
    """Tests for comment_menu function."""

    def test_adds_multiline_comment(self, mock_jira, sent):
        result = comment_menu("PROJ-1").run(reader("-b", "First line", "", "- item", ".", "c"))

        assert result is True
        _, url, payload, _ = sent(0)
        assert url.endswith("/issue/PROJ-1/comment")
        assert [n["type"] for n in payload["body"]["content"]] == ["paragraph", "bulletList"]

    def test_plain_switch(self, mock_jira, sent):
        comment_menu("PROJ-1").run(reader("-p", "-b", "**raw**", ".", "c"))

        assert sent(0)[2]["body"]["content"][0]["content"][0] == {"type": "text", "text": "**raw**"}

    def test_body_required(self, mock_jira, capsys):
        assert comment_menu("PROJ-1").run(reader("c")) is None
        assert "Set Body first" in capsys.readouterr().err
        mock_jira._session.request.assert_not_called()


class TestDeleteCommentAction:
    """Tests for delete_comment_action function."""

    def test_picks_and_deletes(self, mock_jira, respond, sent):
        respond(200, {"comments": [
            {"id": "7", "author": {"displayName": "Ann"}, "created": "2026-02-01T00:00:00", "body": "old note"},
            {"id": "8", "author": {"displayName": "Bob"}, "created": "2026-02-02T00:00:00", "body": "newer"},
        ]})

        assert delete_comment_action("PROJ-1", reader("2")) is True

        method, url, _, _ = sent(1)
        assert method == "DELETE"
        assert url.endswith("/issue/PROJ-1/comment/8")

    def test_nothing_picked(self, mock_jira, respond):
        respond(200, {"comments": []})

        assert delete_comment_action("PROJ-1", reader("1")) is False
        assert mock_jira._session.request.call_count == 1


class TestWorklogMenu:
    """Tests for worklog_menu function."""

    def test_description_defaults_to_summary(self, mock_jira, sent):
        """The work description defaults to the cached key and summary."""
        ISSUE_CACHE.remember("PROJ-1", "Fix login")
        menu = worklog_menu("PROJ-1")

        assert "Description (PROJ-1: Fix login)" in menu.render()

        assert menu.run(reader("w", "-t", "1h30m", "w")) is True
        payload = sent(0)[2]
        assert payload["timeSpent"] == "1h 30m"
        assert payload["comment"]["content"][0]["content"][0]["text"] == "PROJ-1: Fix login"

    def test_description_can_be_cleared(self, mock_jira, sent):
        ISSUE_CACHE.remember("PROJ-1", "Fix login")

        assert worklog_menu("PROJ-1").run(reader("-c", "-", ".", "-t", "1h", "w")) is True
        payload = sent(0)[2]
        assert payload["timeSpent"] == "1h"
        assert "comment" not in payload

    def test_invalid_time_is_rejected(self, mock_jira, capsys):
        menu = worklog_menu("PROJ-1")

        assert menu.run(reader("-t", "later", "w")) is None
        assert "Invalid time spent" in capsys.readouterr().err
        mock_jira._session.request.assert_not_called()


class TestIssueActions:
    """Tests for single-step issue actions."""

    def test_assign_to_user(self, mock_jira, sent, capsys):
        mock_jira._get_json.return_value = [{"accountId": "a1", "displayName": "Ann"}]

        assert assign_action("PROJ-1", reader("2")) is True
        assert sent(0)[2] == {"fields": {"assignee": {"accountId": "a1"}}}
        assert "Assigned PROJ-1 to Ann" in capsys.readouterr().out

    def test_unassign(self, mock_jira, sent):
        mock_jira._get_json.return_value = []

        assert assign_action("PROJ-1", reader("1")) is True
        assert sent(0)[2] == {"fields": {"assignee": None}}

    def test_assign_cancelled(self, mock_jira):
        mock_jira._get_json.return_value = []

        assert assign_action("PROJ-1", reader("")) is False
        mock_jira._session.request.assert_not_called()

    def test_labels(self, mock_jira, sent):
        assert labels_action("PROJ-1", reader("ui, ,backend")) is True
        assert sent(0)[2] == {"fields": {"labels": ["ui", "backend"]}}

    def test_watch_and_unwatch(self, mock_jira, sent):
        mock_jira.myself.return_value = {"accountId": "me"}

        assert watch_action("PROJ-1") is True
        assert sent(0)[0] == "POST"
        assert watch_action("PROJ-1", remove=True) is True
        # calls: POST watcher, GET refresh, DELETE watcher
        assert sent(2)[0] == "DELETE"


class TestIssueMenu:
    """Tests for issue_menu function."""

    def test_keys(self, mock_jira):
        menu = issue_menu("proj-1")

        assert [a.key for a in menu.actions] == ["t", "c", "d", "w", "a", "p", "s", "l", "+", "-", "v", "o"]

    def test_dispatches_to_submenu(self, mock_jira, respond, sent):
        """Choosing t opens the transition menu with the same reader."""
        mock_jira.transitions.return_value = RAW_TRANSITIONS
        respond(200, ISSUE_AFTER)

        read = reader("t", "1")

        result = issue_menu("PROJ-1", read).run(read)

        assert result is True
        assert sent(0)[2] == {"transition": {"id": "11"}}

    def test_priority(self, mock_jira, sent):
        mock_jira.priorities.return_value = named("High", "Low")
        read = reader("p", "2")

        assert issue_menu("PROJ-1", read).run(read) is True
        assert sent(0)[2] == {"fields": {"priority": {"name": "Low"}}}


class TestBulkMenu:
    """Tests for bulk_menu function."""

    @pytest.fixture
    def shared(self, mock_jira):
        mock_jira.transitions.return_value = RAW_TRANSITIONS
        return mock_jira

    def test_offers_shared_transitions(self, shared):
        menu = bulk_menu(["A-1", "A-2"], "project = A")

        assert [a.label for a in menu.actions] == ["Start Progress → In Progress", "Resolve → Done"]
        assert "Send notifications (on)" in menu.render()

    def test_refreshes_listing_after_delay(self, shared, respond, sent, fake_loop, tmp_path, monkeypatch):
        """The listing refresh runs 1.5 seconds after submission."""
        monkeypatch.chdir(tmp_path)
        respond(201, {"taskId": "42"})

        with patch("jiramenu.actions.refresh_listing") as refresh:
            result = bulk_menu(["A-1", "A-2"], "project = A").run(reader("-n", "2"))

            assert result is True
            assert sent()[2] == {
                "bulkTransitionInputs": [{"selectedIssueIdsOrKeys": ["A-1", "A-2"], "transitionId": "31"}],
                "sendBulkNotification": False,
            }
            fake_loop.run_pending()
            refresh.assert_not_called()

            fake_loop.clock.now = 1.5
            fake_loop.run_pending()
            refresh.assert_called_once_with("project = A")

    def test_failure_schedules_nothing(self, shared, fake_loop):
        shared._session.request.side_effect = Exception("503")

        assert bulk_menu(["A-1"], "project = A").run(reader("1")) is False
        assert fake_loop.pending() == 0

    def test_no_shared_transitions(self, mock_jira, capsys):
        mock_jira.transitions.return_value = []

        menu = bulk_menu(["A-1", "B-1"], "project in (A, B)")

        assert menu.actions == []
        assert "No transition is available for all marked issues" in capsys.readouterr().err
