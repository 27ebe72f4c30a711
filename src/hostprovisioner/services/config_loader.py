"""Configuration loader for hostprovisioner."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from hostprovisioner.errors import ProvisionerError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults and host paths."""

    SUPPORTED_KEYS = {
        "verbose",
        "log_file",
        "report_file",
        "os_release_path",
        "backup_dir",
        "mysql_data_dir",
        "mysql_config_path",
        "mysql_config_dir",
        "mysqld_log_path",
        "yum_repos_dir",
        "readiness_retries",
        "readiness_interval_seconds",
        "download_timeout",
        "command_timeout",
        "system_upgrade",
        "nginx_custom_dir",
        "nginx_include_dropin",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ProvisionerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ProvisionerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ProvisionerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise ProvisionerError(f"Unknown configuration keys: {unknown_list}")

        return parsed
