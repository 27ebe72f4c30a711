"""Shared domain models for hostprovisioner."""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .constants import (
    ALL_INTERFACES_ADDRESS,
    DEFAULT_ROOT_PASSWORD,
    LOOPBACK_ADDRESS,
    NGINX_CUSTOM_DIR,
)

_TRUTHY = re.compile(r"^(yes|true|1)$", re.IGNORECASE)


def parse_allow_remote(value) -> bool:
    """Accepts `yes`, `true` or `1`; anything else keeps remote access off."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return _TRUTHY.match(str(value).strip()) is not None


@dataclass(frozen=True)
class SupportedTarget:
    """An OS family/major version pair a workflow is allowed to run on."""

    name: str
    label: str
    id_prefix: str
    version_major: int


AMAZON_LINUX_2023 = SupportedTarget(
    name="al2023", label="Amazon Linux 2023", id_prefix="amzn", version_major=2023
)
RHEL_9 = SupportedTarget(name="rhel9", label="RHEL 9", id_prefix="rhel", version_major=9)


@dataclass(frozen=True)
class HostProfile:
    os_id: str
    version_id: str
    pretty_name: str
    target: SupportedTarget


@dataclass(frozen=True)
class MySQLInstallRequest:
    """Caller-supplied parameters for the MySQL install workflow."""

    db_name: str
    db_user: str
    db_password: str
    root_password: str = DEFAULT_ROOT_PASSWORD
    allow_remote: bool = False

    @property
    def bind_address(self) -> str:
        return ALL_INTERFACES_ADDRESS if self.allow_remote else LOOPBACK_ADDRESS

    @property
    def user_host(self) -> str:
        return "%" if self.allow_remote else "localhost"


@dataclass(frozen=True)
class UninstallOptions:
    purge_data: bool = False
    remove_keys: bool = False
    assume_yes: bool = False


@dataclass(frozen=True)
class NginxInstallRequest:
    custom_dir: str = NGINX_CUSTOM_DIR
    open_firewall: bool = True


class StepStatus:
    SUCCESS = "success"
    SKIPPED = "skipped"
    DEGRADED = "degraded"
    WARNING = "warning"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    """Value returned by a step callback."""

    status: str = StepStatus.SUCCESS
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> "Outcome":
        return cls(StepStatus.SUCCESS, message)

    @classmethod
    def skipped(cls, message: str) -> "Outcome":
        return cls(StepStatus.SKIPPED, message)

    @classmethod
    def degraded(cls, message: str) -> "Outcome":
        return cls(StepStatus.DEGRADED, message)


@dataclass(frozen=True)
class StepResult:
    name: str
    status: str
    message: str = ""
    advisory: bool = False
    duration_seconds: Optional[float] = None


@dataclass
class Report:
    """Step results and final observations of one workflow run."""

    workflow: str
    steps: List[StepResult] = field(default_factory=list)
    observations: List[Tuple[str, str]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def status(self) -> str:
        statuses = {step.status for step in self.steps}
        if self.error or StepStatus.FAILED in statuses:
            return StepStatus.FAILED
        if statuses & {StepStatus.DEGRADED, StepStatus.WARNING}:
            return StepStatus.DEGRADED
        return StepStatus.SUCCESS

    def result_for(self, name: str) -> Optional[StepResult]:
        for step in reversed(self.steps):
            if step.name == name:
                return step
        return None

    def observation(self, key: str) -> Optional[str]:
        for existing_key, value in self.observations:
            if existing_key == key:
                return value
        return None
