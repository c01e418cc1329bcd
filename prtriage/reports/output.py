"""CSV, JSON and HTML writers for report artifacts."""

from __future__ import annotations

import csv
import json
import os
from html import escape
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from prtriage.github.models import PullRequest
from prtriage.triage.classifiers import sort_pulls

HTML_HEAD = (
    "<head><script src='./web_libraries/sorttable.js'></script>"
    "<link rel='stylesheet' href='./web_libraries/bootstrap.min.css'></head>"
)


def ensure_dir(path: str | Path) -> None:
    """Create output directories as-needed without raising for existing folders."""
    os.makedirs(path, exist_ok=True)


def save_json(path: str | Path, data: Any) -> None:
    """Write JSON to disk using UTF-8 and deterministic formatting."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)


def write_csv(path: str | Path, header: Sequence[str], rows: Iterable[Dict[str, Any]]) -> None:
    """Write dict rows in `header` order."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in rows:
            writer.writerow([row.get(column, "") for column in header])


def pulls_table(title: str, pulls: Iterable[PullRequest]) -> List[str]:
    """An HTML section listing pulls sorted by repository then number."""
    html = [f"<h2>{escape(title)}</h2>", "<table border='1' style='width:100%'> <tr>",
            "<td>Title:</td><td>Author:</td><td>Location:</td></tr>"]
    for pull in sort_pulls(pulls):
        html.append(
            f"<tr><td> <a href='{escape(pull.html_url)}'>{escape(pull.title)}</a></td> "
            f"<td>{escape(pull.author or '')}</td><td>{escape(pull.repo_name)}</td></tr>"
        )
    html.append("</table>")
    return html


def rows_table(rows: List[Dict[str, Any]], links: Optional[Dict[str, str]] = None) -> List[str]:
    """A sortable HTML table of dict rows; `links` maps a column to a per-row URL key."""
    links = links or {}
    if not rows:
        return ["<p>No entries.</p>"]
    columns = [c for c in rows[0].keys() if c not in links.values()]
    html = ["<table border='1' style='width:100%' class='sortable table table-hover'> <tr>"]
    html.extend(f"<th>{escape(str(column))}</th>" for column in columns)
    html.append("</tr>")
    for row in rows:
        html.append("<tr>")
        for column in columns:
            value = escape(str(row.get(column, "")))
            url_key = links.get(column)
            if url_key and row.get(url_key):
                html.append(f"<td><a href='{escape(str(row[url_key]))}'>{value}</a></td>")
            else:
                html.append(f"<td>{value}</td>")
        html.append("</tr>")
    html.append("</table>")
    return html


def write_html(path: str | Path, title: str, body: Iterable[str]) -> None:
    lines = [f"<html><title>{escape(title)}</title>", HTML_HEAD, "<body>", f"<h1>{escape(title)}</h1>"]
    lines.extend(body)
    lines.extend(["</body>", "</html>"])
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")


__all__ = ["ensure_dir", "save_json", "write_csv", "pulls_table", "rows_table", "write_html"]
