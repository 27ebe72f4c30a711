"""Runtime settings resolved from defaults and the YAML config file."""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from . import constants
from .errors import ProvisionerError

_FLAG_VALUES = {
    "yes": True,
    "true": True,
    "on": True,
    "1": True,
    "no": False,
    "false": False,
    "off": False,
    "0": False,
}


@dataclass(frozen=True)
class Settings:
    """Host paths and tunables shared by every workflow."""

    os_release_path: str = constants.OS_RELEASE_PATH
    backup_dir: str = constants.BACKUP_DIR
    mysql_data_dir: str = constants.MYSQL_DATA_DIR
    mysql_config_path: str = constants.MYSQL_CONFIG_PATH
    mysql_config_dir: str = constants.MYSQL_CONFIG_DIR
    mysqld_log_path: str = constants.MYSQLD_LOG_PATH
    yum_repos_dir: str = constants.YUM_REPOS_DIR
    readiness_retries: int = constants.READINESS_RETRIES
    readiness_interval_seconds: float = constants.READINESS_INTERVAL_SECONDS
    download_timeout: float = 60.0
    command_timeout: Optional[float] = None
    system_upgrade: bool = True
    nginx_custom_dir: str = constants.NGINX_CUSTOM_DIR
    nginx_include_dropin: str = constants.NGINX_INCLUDE_DROPIN
    report_file: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Dict[str, Any]) -> "Settings":
        known = {item.name: item for item in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            if key not in known or value is None:
                continue
            kwargs[key] = cls._coerce(key, value, known[key].default)
        return cls(**kwargs)

    @staticmethod
    def _coerce(key: str, value: Any, default: Any) -> Any:
        try:
            if isinstance(default, bool):
                if isinstance(value, bool):
                    return value
                return _FLAG_VALUES[str(value).strip().lower()]
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float) or key == "command_timeout":
                return float(value)
        except (KeyError, TypeError, ValueError) as exc:
            raise ProvisionerError(f"Invalid value for '{key}': {value!r}") from exc
        return str(value)
