"""Tests for prtriage.github.models: timestamp parsing, payload mapping and recency limits.

Run with coverage:
    pytest tests/test_models.py --maxfail=1 -v --cov=prtriage.github.models --cov-report=term-missing
"""

import datetime as dt

import pytest

from prtriage.github import models

UTC = dt.timezone.utc


def _payload(number=1, **extra):
    payload = {
        "number": number,
        "title": f"PR {number}",
        "html_url": f"https://github.com/acme/widgets/pull/{number}",
        "state": "open",
        "user": {"login": "alice"},
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
        "head": {"sha": "abc"},
        "base": {"repo": {"name": "widgets", "owner": {"login": "acme", "type": "Organization"}}},
    }
    payload.update(extra)
    return payload


def test_parse_timestamp_variants():
    expected = dt.datetime(2024, 1, 1, tzinfo=UTC)
    assert models.parse_timestamp("2024-01-01T00:00:00Z") == expected
    assert models.parse_timestamp("2024-01-01 00:00:00 UTC") == expected
    assert models.parse_timestamp("2024-01-01") == expected
    assert models.parse_timestamp(dt.date(2024, 1, 1)) == expected
    assert models.parse_timestamp(dt.datetime(2024, 1, 1)) == expected
    assert models.parse_timestamp("") is None
    assert models.parse_timestamp(None) is None
    assert models.parse_timestamp("not a date") is None


def test_pull_request_from_api_maps_fields():
    pull = models.PullRequest.from_api(_payload(7, merged_at=None, mergeable=False))
    assert pull.number == 7
    assert pull.author == "alice"
    assert pull.repository == models.Repository("acme", "widgets")
    assert pull.repo_name == "widgets"
    assert pull.head_sha == "abc"
    assert pull.mergeable is False
    assert pull.created_at == dt.datetime(2024, 1, 1, tzinfo=UTC)


def test_pull_request_from_api_falls_back_to_repo_argument():
    payload = _payload(3)
    payload.pop("base")
    pull = models.PullRequest.from_api(payload, repo="acme/gadgets")
    assert pull.repository.full_name == "acme/gadgets"


def test_pull_request_requires_created_at():
    with pytest.raises(ValueError):
        models.PullRequest.from_api(_payload(1, created_at=None))


def test_repository_parse_rejects_bad_names():
    assert models.Repository.parse("acme/widgets").full_name == "acme/widgets"
    with pytest.raises(ValueError):
        models.Repository.parse("widgets")


def test_tag_and_commit_from_api():
    tag = models.Tag.from_api({"name": "v1.2.0", "commit": {"sha": "s1"}})
    assert tag == models.Tag("v1.2.0", "s1")
    commit = models.Commit.from_api({
        "sha": "s1",
        "author": None,
        "commit": {"message": "fix", "author": {"name": "Bob", "date": "2024-03-01T10:00:00Z"}},
    })
    assert commit.author == "Bob"
    assert commit.date == dt.datetime(2024, 3, 1, 10, tzinfo=UTC)


def test_recency_limit_keeps_strictly_newer():
    limit = models.RecencyLimit.parse("created_at", "2024-01-01")
    older = models.PullRequest.from_api(_payload(1, created_at="2023-12-01T00:00:00Z"))
    newer = models.PullRequest.from_api(_payload(2, created_at="2024-02-01T00:00:00Z"))
    boundary = models.PullRequest.from_api(_payload(3, created_at="2024-01-01T00:00:00Z"))
    assert not limit.retains(older)
    assert limit.retains(newer)
    assert not limit.retains(boundary)


def test_recency_limit_missing_timestamp_is_dropped():
    limit = models.RecencyLimit("closed_at", dt.datetime(2024, 1, 1))
    assert limit.cutoff.tzinfo is not None
    assert not limit.retains(models.PullRequest.from_api(_payload(1)))


def test_recency_limit_rejects_unknown_attribute():
    with pytest.raises(ValueError):
        models.RecencyLimit.parse("title", "2024-01-01")
    with pytest.raises(ValueError):
        models.RecencyLimit.parse("created_at", "yesterday")


def test_enriched_last_comment():
    pull = models.PullRequest.from_api(_payload(1))
    record = models.EnrichedPullRequest(pull=pull)
    assert record.last_comment is None
    record.comments = [models.Comment("a", "first"), models.Comment("b", "second")]
    assert record.last_comment.body == "second"
