"""Central configuration constants for the GitHub pull-request tooling."""

from __future__ import annotations

import os
from typing import Dict, List, Optional

from prtriage.secrets import load_local_secrets, resolve_github_token

_SECRETS = load_local_secrets()
GITHUB_TOKEN: Optional[str] = resolve_github_token(_SECRETS)
USER_AGENT = "prtriage-pull-request-reports/1.0"
BASE_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
PER_PAGE = 100
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "90"))
POOL_SIZE = int(os.getenv("PRTRIAGE_POOL_SIZE", "10"))
FETCH_POLICY = os.getenv("PRTRIAGE_FETCH_POLICY", "fail-fast")
STALE_DAYS = int(os.getenv("PRTRIAGE_STALE_DAYS", "40"))
OUTPUT_DIR = os.getenv("PRTRIAGE_OUTPUT_DIR", ".")

SUPPORTED_MODULES: List[str] = [
    "accounts",
    "apache",
    "apt",
    "bootstrap",
    "concat",
    "exec",
    "facter_task",
    "firewall",
    "haproxy",
    "hocon",
    "ibm_installation_manager",
    "inifile",
    "java_ks",
    "java",
    "motd",
    "mysql",
    "ntp",
    "package",
    "postgresql",
    "puppet_conf",
    "reboot",
    "resource",
    "satellite_pe_tools",
    "service",
    "stdlib",
    "tagmail",
    "tomcat",
    "translate",
    "vcsrepo",
    "vsphere",
    "websphere_application_server",
    "docker",
    "helm",
    "kubernetes",
    "rook",
    "amazon_aws",
    "azure_arm",
    "acl",
    "chocolatey",
    "dsc",
    "dsc_lite",
    "iis",
    "powershell",
    "registry",
    "scheduled_task",
    "sqlserver",
    "wsus_client",
]
SUPPORTED_MODULES_REGEX = (
    "^(puppetlabs-(" + "|".join(SUPPORTED_MODULES) + ")|modulesync_configs)$"
)

# name -> canonical color (hex, no leading '#')
DEFAULT_LABELS: List[Dict[str, str]] = [
    {"name": "needs-squash", "color": "bfe5bf"},
    {"name": "needs-rebase", "color": "207de5"},
    {"name": "needs-tests", "color": "f7c6c7"},
    {"name": "needs-docs", "color": "006b75"},
    {"name": "bugfix", "color": "009800"},
    {"name": "feature", "color": "0052cc"},
    {"name": "tests-fail", "color": "e11d21"},
    {"name": "backwards-incompatible", "color": "eb6420"},
]

__all__ = [
    "GITHUB_TOKEN",
    "USER_AGENT",
    "BASE_URL",
    "PER_PAGE",
    "REQUEST_TIMEOUT",
    "POOL_SIZE",
    "FETCH_POLICY",
    "STALE_DAYS",
    "OUTPUT_DIR",
    "SUPPORTED_MODULES",
    "SUPPORTED_MODULES_REGEX",
    "DEFAULT_LABELS",
]
