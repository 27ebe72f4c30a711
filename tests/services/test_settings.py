import pytest

from hostprovisioner import constants
from hostprovisioner.errors import ProvisionerError
from hostprovisioner.models import MySQLInstallRequest, parse_allow_remote
from hostprovisioner.settings import Settings


def test_settings_defaults_match_host_paths():
    settings = Settings()

    assert settings.mysql_data_dir == "/var/lib/mysql"
    assert settings.backup_dir == "/root"
    assert settings.readiness_retries == constants.READINESS_RETRIES
    assert settings.readiness_interval_seconds == 2.0


def test_from_mapping_coerces_and_ignores_cli_only_keys():
    settings = Settings.from_mapping(
        {
            "verbose": True,
            "log_file": "run.log",
            "readiness_retries": "20",
            "readiness_interval_seconds": 1,
            "command_timeout": "300",
            "system_upgrade": False,
            "report_file": None,
        }
    )

    assert settings.readiness_retries == 20
    assert settings.readiness_interval_seconds == 1.0
    assert settings.command_timeout == 300.0
    assert settings.system_upgrade is False
    assert settings.report_file is None


def test_from_mapping_rejects_invalid_numbers():
    with pytest.raises(ProvisionerError, match="Invalid value for 'readiness_retries'"):
        Settings.from_mapping({"readiness_retries": "many"})


@pytest.mark.parametrize(
    "value, expected",
    [("false", False), ("No", False), ("0", False), ("off", False), ("yes", True), (1, True)],
)
def test_from_mapping_parses_flag_strings(value, expected):
    assert Settings.from_mapping({"system_upgrade": value}).system_upgrade is expected


def test_from_mapping_rejects_unknown_flag_values():
    with pytest.raises(ProvisionerError, match="Invalid value for 'system_upgrade'"):
        Settings.from_mapping({"system_upgrade": "sometimes"})


@pytest.mark.parametrize(
    "value, expected",
    [
        ("yes", True),
        ("Yes", True),
        ("true", True),
        ("1", True),
        (True, True),
        ("no", False),
        ("", False),
        ("yess", False),
        (None, False),
    ],
)
def test_parse_allow_remote(value, expected):
    assert parse_allow_remote(value) is expected


def test_install_request_derives_network_scope():
    remote = MySQLInstallRequest("db", "user", "pw", allow_remote=True)
    local = MySQLInstallRequest("db", "user", "pw")

    assert (remote.bind_address, remote.user_host) == ("0.0.0.0", "%")
    assert (local.bind_address, local.user_host) == ("127.0.0.1", "localhost")
    assert local.root_password == constants.DEFAULT_ROOT_PASSWORD
