import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional

import pytest

import hostprovisioner.services.host as host_module
from hostprovisioner.errors import CommandError
from hostprovisioner.settings import Settings

AL2023_RELEASE = 'NAME="Amazon Linux"\nVERSION="2023"\nID="amzn"\nVERSION_ID="2023"\nPRETTY_NAME="Amazon Linux 2023.4.20240416"\n'
RHEL9_RELEASE = 'NAME="Red Hat Enterprise Linux"\nID="rhel"\nVERSION_ID="9.3"\nPRETTY_NAME="Red Hat Enterprise Linux 9.3 (Plow)"\n'


@dataclass
class RecordedCall:
    cmd: List[str]
    check: bool
    capture_output: bool
    input: Optional[str] = None
    env: Optional[Dict[str, str]] = None

    @property
    def line(self) -> str:
        return " ".join(self.cmd)


class FakeCommandRunner:
    """Records every command and answers from scripted rules instead of the host.

    `handler(call)` may return `(returncode, stdout)` to answer a call, or None to
    fall through to the prefix rules registered with `respond()`. Unmatched
    commands succeed with empty output.
    """

    def __init__(self, handler=None):
        self.handler = handler
        self.calls: List[RecordedCall] = []
        self.rules = []

    def respond(self, prefix, returncode=0, stdout=""):
        self.rules.insert(0, (list(prefix), returncode, stdout))
        return self

    def _answer(self, call: RecordedCall):
        if self.handler is not None:
            answer = self.handler(call)
            if answer is not None:
                return answer
        for prefix, returncode, stdout in self.rules:
            if call.cmd[: len(prefix)] == prefix:
                return returncode, stdout
        return 0, ""

    def run(self, cmd, check=True, capture_output=False, timeout=None, input=None, env=None):
        call = RecordedCall(list(cmd), check, capture_output, input=input, env=env)
        self.calls.append(call)

        returncode, stdout = self._answer(call)
        if check and returncode != 0:
            raise CommandError(f"Command failed ({returncode}): {call.line}", returncode=returncode)
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr="")

    @property
    def lines(self) -> List[str]:
        return [call.line for call in self.calls]

    def ran(self, line: str) -> bool:
        return line in self.lines

    def index_of(self, prefix: str) -> int:
        for index, line in enumerate(self.lines):
            if line.startswith(prefix):
                return index
        raise AssertionError(f"{prefix!r} was never executed")


class FakeDownloadService:
    def __init__(self):
        self.urls = []

    def download_file(self, url, dest_path, description="Downloading..."):
        self.urls.append(url)
        with open(dest_path, "wb") as file_obj:
            file_obj.write(b"rpm")


@pytest.fixture(autouse=True)
def running_as_root(monkeypatch):
    monkeypatch.setattr(host_module.os, "geteuid", lambda: 0)


@pytest.fixture
def fake_runner():
    return FakeCommandRunner()


@pytest.fixture
def write_os_release(tmp_path):
    def _write(content):
        path = tmp_path / "os-release"
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def host_settings(tmp_path, write_os_release):
    """Settings whose host paths all live under `tmp_path`."""
    etc = tmp_path / "etc"
    (etc / "yum.repos.d").mkdir(parents=True)
    (etc / "nginx" / "conf.d").mkdir(parents=True)
    return Settings(
        os_release_path=write_os_release(AL2023_RELEASE),
        backup_dir=str(tmp_path / "backups"),
        mysql_data_dir=str(tmp_path / "var" / "lib" / "mysql"),
        mysql_config_path=str(etc / "my.cnf"),
        mysql_config_dir=str(etc / "my.cnf.d"),
        mysqld_log_path=str(tmp_path / "mysqld.log"),
        yum_repos_dir=str(etc / "yum.repos.d"),
        readiness_retries=3,
        readiness_interval_seconds=0.0,
        nginx_custom_dir=str(tmp_path / "opt" / "custom" / "nginx"),
        nginx_include_dropin=str(etc / "nginx" / "conf.d" / "99-custom-include.conf"),
    )


@pytest.fixture
def runner_factory():
    return FakeCommandRunner


@pytest.fixture
def fake_download():
    return FakeDownloadService()


@pytest.fixture
def releases():
    return {"al2023": AL2023_RELEASE, "rhel9": RHEL9_RELEASE}
