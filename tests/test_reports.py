"""Tests for the report commands in prtriage.reports using fake gateways.

Run with coverage:
    pytest tests/test_reports.py --maxfail=1 -v --cov=prtriage.reports --cov-report=term-missing
"""

import csv
import datetime as dt
from unittest.mock import MagicMock, patch

import pytest

from prtriage import reports
from prtriage.github.models import (
    Comment,
    Commit,
    EnrichedPullRequest,
    PullRequest,
    Repository,
    Status,
)
from prtriage.reports import output, pull_requests, rebase_bot, review_list, triage

UTC = dt.timezone.utc
NOW = dt.datetime(2024, 6, 1, tzinfo=UTC)
REPO = "acme/widgets"


def _pull(number, updated_days_ago=1, mergeable=None, title=None):
    return PullRequest(
        number=number,
        repository=Repository("acme", "widgets"),
        author="carol",
        created_at=NOW - dt.timedelta(days=60),
        updated_at=NOW - dt.timedelta(days=updated_days_ago),
        title=title or f"PR {number}",
        html_url=f"https://github.com/{REPO}/pull/{number}",
        head_sha=f"sha{number}",
        mergeable=mergeable,
    )


class FakeGateway:
    def __init__(self, pulls, comments=None, mergeable=None, labels=None):
        self.pulls = pulls
        self.comments = comments or {}
        self.mergeable = mergeable or {}
        self.labels = labels or {}
        self.members = ["alice"]

    def list_pull_requests(self, repo, state="open", sort="updated"):
        return list(self.pulls)

    def fetch_statuses(self, repo, sha):
        return [Status("failure")] if sha == "sha1" else [Status("success")]

    def fetch_pull_request_commits(self, repo, number):
        return [Commit("a"), Commit("b")] if number == 2 else [Commit("a")]

    def fetch_issue_comments(self, repo, number):
        return list(self.comments.get(number, []))

    def fetch_pull_request(self, repo, number):
        return _pull(number, mergeable=self.mergeable.get(number))

    def pr_has_label(self, repo, number, label):
        return label in self.labels.get(number, ())

    def organization_members(self, org):
        return list(self.members)


def test_handle_pull_labels_conflicting_pull():
    gateway = MagicMock()
    gateway.pr_mergeable.return_value = False
    gateway.pr_has_label.return_value = False
    pull = _pull(4)
    assert rebase_bot.handle_pull(gateway, REPO, pull, no_op=False) == "labeled"
    gateway.add_comment_to_pr.assert_called_once_with(REPO, 4, rebase_bot.REBASE_COMMENT.format(author="carol"))
    gateway.add_label_to_pr.assert_called_once_with(REPO, 4, rebase_bot.REBASE_LABEL)


def test_handle_pull_no_op_makes_no_changes():
    gateway = MagicMock()
    gateway.pr_mergeable.return_value = False
    gateway.pr_has_label.return_value = False
    assert rebase_bot.handle_pull(gateway, REPO, _pull(4), no_op=True) == "labeled"
    gateway.add_comment_to_pr.assert_not_called()
    gateway.add_label_to_pr.assert_not_called()


@pytest.mark.parametrize(
    "mergeable, has_label, expected",
    [(None, True, "unknown"), (False, True, "already-labeled"), (True, True, "unlabeled"), (True, False, "clean")],
)
def test_handle_pull_outcomes(mergeable, has_label, expected):
    gateway = MagicMock()
    gateway.pr_mergeable.return_value = mergeable
    gateway.pr_has_label.return_value = has_label
    assert rebase_bot.handle_pull(gateway, REPO, _pull(4), no_op=False) == expected
    if expected == "unlabeled":
        gateway.remove_label_from_pr.assert_called_once_with(REPO, 4, rebase_bot.REBASE_LABEL)


def test_review_rows_reports_last_comment():
    items = [
        EnrichedPullRequest(pull=_pull(2), comments=[Comment("carol", "hey @alice", created_at=NOW - dt.timedelta(days=3))]),
        EnrichedPullRequest(pull=_pull(1), comments=[]),
    ]
    rows = review_list.review_rows(REPO, items, {"alice": "member"}, now=NOW)
    assert [row["pr"] for row in rows] == [1, 2]
    assert rows[0]["last_comment"] == "" and rows[0]["num_comments"] == 0
    assert rows[0]["no_comment_from_member"] is True
    assert rows[1]["by"] == "carol"
    assert rows[1]["age_comment"] == 3
    assert rows[1]["age"] == 60
    assert rows[1]["last_comment_mentions_member"] is True


def test_triage_repo_accumulates_totals():
    pulls = [_pull(1), _pull(2), _pull(3, updated_days_ago=45)]
    gateway = FakeGateway(
        pulls,
        comments={2: [Comment("alice", "please rebase")], 3: [Comment("carol", "ping @alice")]},
        mergeable={1: False},
    )
    totals = triage.TriageTotals()
    directory = triage.MembershipDirectory(gateway)
    line = triage.triage_repo(gateway, REPO, totals, directory, pool_size=2, policy="fail-fast", now=NOW)

    assert line == f"{REPO}, 1, 1, 1, 1, 1, 3, 1, 1"
    assert totals.open == 3
    assert [p.number for p in totals.uncommented] == [1]
    assert [p.number for p in totals.rebase_without_label] == [1]
    assert [p.number for p in totals.no_activity] == [3]
    assert totals.unmerged == 3 and totals.merged == 0


def test_write_overview_and_html(tmp_path):
    totals = triage.TriageTotals(open=5, rebase=2, uncommented=[_pull(1)])
    triage.write_overview(totals, tmp_path)
    with open(tmp_path / "overview.csv", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["total PRs"] == "5"
    assert rows[0]["uncommented"] == "1"

    output.write_html(tmp_path / "report.html", "Triage", triage.report_sections(totals))
    html = (tmp_path / "report.html").read_text()
    assert "PRs that have 0 comments:" in html
    assert f"https://github.com/{REPO}/pull/1" in html


def test_rows_table_links_and_hides_url_column():
    rows = [{"pr": 1, "url": "https://example.test/1", "title": "<b>x</b>"}]
    html = "\n".join(output.rows_table(rows, links={"pr": "url"}))
    assert "<a href='https://example.test/1'>1</a>" in html
    assert "<th>url</th>" not in html
    assert "&lt;b&gt;" in html


def test_select_pulls_needs_rebase():
    gateway = FakeGateway([_pull(1), _pull(2)], mergeable={2: False})
    settings = MagicMock(pool_size=2, policy="fail-fast")
    directory = triage.MembershipDirectory(gateway)
    pulls = pull_requests.select_pulls(gateway, REPO, "needs_rebase", settings, directory)
    assert [p.number for p in pulls] == [2]


def test_format_entry_pluralises():
    entry = {"repo": REPO, "pulls": [_pull(1)], "pull_count": 1}
    assert pull_requests.format_entry(entry, count_only=False) == [
        f"=== {REPO} ===",
        "  1 open pull request",
        f"  https://github.com/{REPO}/pull/1 - PR 1",
    ]
    assert pull_requests.format_entry({"repo": REPO, "pulls": [], "pull_count": 0}, True)[1] == "  no open pull requests"


def test_pull_requests_rejects_after_and_before(capsys):
    with pytest.raises(SystemExit) as info:
        pull_requests.main(["-n", "acme", "-t", "tok", "-a", "3", "-b", "5"])
    assert info.value.code == 1
    assert "Only one of -a and -b" in capsys.readouterr().out


def test_pull_requests_main_prints_counts(capsys):
    gateway = FakeGateway([_pull(1), _pull(2)])
    with patch("prtriage.reports.pull_requests.build_gateway", return_value=gateway), \
            patch("prtriage.reports.pull_requests.selected_repos", return_value=[REPO]):
        pull_requests.main(["-n", "acme", "-t", "tok", "-c"])
    out = capsys.readouterr().out
    assert f"=== {REPO} ===" in out
    assert "2 open pull requests" in out


def test_dispatcher_rejects_unknown_command(capsys):
    with pytest.raises(SystemExit) as info:
        reports.main(["nope"])
    assert info.value.code == 1
    assert "unknown command: nope" in capsys.readouterr().out


def test_dispatcher_routes_to_command():
    called = {}
    with patch.dict(reports.COMMANDS, {"triage": lambda argv: called.setdefault("argv", argv)}):
        reports.main(["triage", "-n", "acme"])
    assert called["argv"] == ["-n", "acme"]
