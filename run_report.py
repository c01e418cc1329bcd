"""Convenience shim to run a report command without installing the package."""

from __future__ import annotations

from prtriage.reports import main


if __name__ == "__main__":
    main()
