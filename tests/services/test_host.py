import pytest

import hostprovisioner.services.host as host_module
from hostprovisioner.errors import UnsupportedHostError
from hostprovisioner.models import AMAZON_LINUX_2023, RHEL_9
from hostprovisioner.services.host import HostService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None


def build_service(tmp_path, content):
    path = tmp_path / "os-release"
    path.write_text(content, encoding="utf-8")
    return HostService(str(path), logger=DummyLogger())


def test_read_os_release_handles_quotes_and_comments(tmp_path):
    service = build_service(
        tmp_path,
        "# comment\nNAME='Red Hat Enterprise Linux'\nID=rhel\nVERSION_ID=\"9.3\"\n\nBROKEN\n",
    )

    release = service.read_os_release()

    assert release["NAME"] == "Red Hat Enterprise Linux"
    assert release["ID"] == "rhel"
    assert release["VERSION_ID"] == "9.3"
    assert "BROKEN" not in release


@pytest.mark.parametrize(
    "os_id, version_id, expected",
    [
        ("amzn", "2023", AMAZON_LINUX_2023),
        ("rhel", "9.3", RHEL_9),
        ("rhel", "9", RHEL_9),
        ("amzn", "2", None),
        ("rhel", "8.9", None),
        ("ubuntu", "22.04", None),
        ("rhel", "", None),
    ],
)
def test_match_target(tmp_path, os_id, version_id, expected):
    service = build_service(tmp_path, "")

    assert service.match_target(os_id, version_id, (AMAZON_LINUX_2023, RHEL_9)) == expected


def test_detect_builds_profile(tmp_path):
    service = build_service(
        tmp_path, 'ID="amzn"\nVERSION_ID="2023"\nPRETTY_NAME="Amazon Linux 2023"\n'
    )

    profile = service.detect((AMAZON_LINUX_2023, RHEL_9))

    assert profile.target == AMAZON_LINUX_2023
    assert profile.pretty_name == "Amazon Linux 2023"


def test_detect_rejects_target_outside_workflow(tmp_path):
    service = build_service(tmp_path, 'ID="rhel"\nVERSION_ID="9.2"\n')

    with pytest.raises(UnsupportedHostError, match="This workflow targets Amazon Linux 2023"):
        service.detect((AMAZON_LINUX_2023,))


def test_detect_fails_when_os_release_missing(tmp_path):
    service = HostService(str(tmp_path / "missing"), logger=DummyLogger())

    with pytest.raises(UnsupportedHostError, match="missing or unreadable"):
        service.detect((AMAZON_LINUX_2023,))


def test_ensure_root(tmp_path, monkeypatch):
    service = build_service(tmp_path, "")

    service.ensure_root()

    monkeypatch.setattr(host_module.os, "geteuid", lambda: 1000)
    with pytest.raises(UnsupportedHostError, match="Root privileges are required"):
        service.ensure_root()
