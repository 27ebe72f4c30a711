"""Actionable error catalog for hostprovisioner."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "os_release_missing": {
        "what": "Cannot detect OS: {path} is missing or unreadable.",
        "next": "Run on an Amazon Linux 2023 or RHEL 9 host, or point `os_release_path` to a valid file.",
    },
    "unsupported_os": {
        "what": "Unsupported host: ID='{os_id}' VERSION_ID='{version_id}'.",
        "next": "This workflow targets {targets}. Run it on one of those hosts.",
    },
    "not_root": {
        "what": "Root privileges are required.",
        "next": "Re-run the command with sudo or as root.",
    },
    "repository_install_failed": {
        "what": "Failed to install the MySQL repository package from {url}.",
        "next": "Visit https://dev.mysql.com/downloads/repo/yum/ for the latest EL9 repository RPM.",
    },
    "package_install_failed": {
        "what": "dnf install {package} failed.",
        "next": "Run `sudo dnf repolist` and check repository GPG keys or network access.",
    },
    "package_removal_failed": {
        "what": "dnf remove failed for: {packages}.",
        "next": "Inspect `dnf history` and remove the packages manually before retrying.",
    },
    "nginx_config_invalid": {
        "what": "nginx configuration test failed.",
        "next": "Run `nginx -t` to see the offending directive and fix it before reloading.",
    },
    "nginx_reload_failed": {
        "what": "Could not reload or restart nginx.",
        "next": "Check `journalctl -u nginx.service` for details.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
