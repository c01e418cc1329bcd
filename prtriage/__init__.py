"""Pull-request triage and reporting tools for GitHub organisations."""

__version__ = "1.0.0"
