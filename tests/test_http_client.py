"""Unit tests for prtriage.github.http_client covering errors and pagination.

Execute with coverage to validate networking helpers:
    pytest tests/test_http_client.py --maxfail=1 -v --cov=prtriage.github.http_client --cov-report=term-missing
"""

from typing import Any, Dict
from unittest.mock import MagicMock

import pytest
import requests

from prtriage.github import http_client


def _make_resp(status: int = 200, payload: Any = None, headers: Dict[str, str] | None = None):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    if payload is None:
        payload = {}
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


def test_build_session_sets_headers():
    session = http_client.build_session("abc")
    assert session.headers["Authorization"] == "Bearer abc"
    assert session.headers["Accept"] == "application/vnd.github+json"
    assert "Authorization" not in http_client.build_session(None).headers


def test_build_session_pool_fits_worker_count():
    session = http_client.build_session(None, pool_size=32)
    assert session.get_adapter("https://api.github.com/x")._pool_maxsize == 32
    small = http_client.build_session(None, pool_size=2)
    assert small.get_adapter("https://api.github.com/x")._pool_maxsize == http_client.DEFAULT_POOLSIZE


def test_log_http_error_handles_json_and_text(capsys):
    resp = _make_resp(403, {"message": "bad"})
    http_client.log_http_error(resp, "url")
    assert "bad" in capsys.readouterr().out

    resp = _make_resp(500)
    resp.json.side_effect = ValueError()
    resp.text = "plain"
    http_client.log_http_error(resp, "url")
    assert "plain" in capsys.readouterr().out


def test_request_success_returns_response():
    session = MagicMock()
    session.request.return_value = _make_resp(200, {"ok": 1})
    resp = http_client.request(session, "GET", "https://api.github.com/x")
    assert resp.json() == {"ok": 1}
    assert session.request.call_count == 1


def test_request_404_raises_not_found(capsys):
    session = MagicMock()
    session.request.return_value = _make_resp(404, {"message": "Not Found"})
    with pytest.raises(http_client.NotFoundError) as info:
        http_client.request(session, "GET", "url")
    assert info.value.status == 404
    assert "Not Found" in capsys.readouterr().out


def test_request_other_status_raises_network_error_without_retry():
    session = MagicMock()
    session.request.return_value = _make_resp(502, {"message": "Bad gateway"})
    with pytest.raises(http_client.NetworkError) as info:
        http_client.request(session, "GET", "url")
    assert info.value.status == 502
    assert session.request.call_count == 1


def test_request_transport_failure_raises_network_error():
    session = MagicMock()
    session.request.side_effect = requests.ConnectionError("boom")
    with pytest.raises(http_client.NetworkError):
        http_client.request(session, "GET", "url")


def test_next_page_url_reads_link_header():
    resp = _make_resp(headers={
        "Link": '<https://api.github.com/x?page=2>; rel="next", <https://api.github.com/x?page=5>; rel="last"'
    })
    assert http_client.next_page_url(resp) == "https://api.github.com/x?page=2"
    assert http_client.next_page_url(_make_resp()) is None


def test_paged_get_accumulates_pages_via_link_header():
    session = MagicMock()
    session.request.side_effect = [
        _make_resp(
            200,
            [{"id": 1}, {"id": 2}],
            headers={"Link": '<https://api.github.com/x?per_page=100&page=2>; rel="next"'},
        ),
        _make_resp(200, [{"id": 3}]),
    ]
    results = http_client.paged_get(session, "https://api.github.com/x", params={"state": "open"})
    assert [entry["id"] for entry in results] == [1, 2, 3]

    first, second = session.request.call_args_list
    assert first.args[1] == "https://api.github.com/x"
    assert first.kwargs["params"] == {"state": "open", "per_page": http_client.PER_PAGE}
    assert second.args[1] == "https://api.github.com/x?per_page=100&page=2"
    assert second.kwargs["params"] is None


def test_paged_get_rejects_non_list_body():
    session = MagicMock()
    session.request.return_value = _make_resp(200, {"message": "not a list"})
    with pytest.raises(http_client.NetworkError):
        http_client.paged_get(session, "url")
