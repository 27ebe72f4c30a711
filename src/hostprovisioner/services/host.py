"""Host identity and privilege checks."""

import os
import shlex
from typing import Dict, Iterable, Optional

from packaging import version

from hostprovisioner.errors import UnsupportedHostError
from hostprovisioner.errors_catalog import actionable_error
from hostprovisioner.models import HostProfile, SupportedTarget


class HostService:
    """Reads OS release metadata and gates execution on supported targets."""

    def __init__(self, os_release_path: str, logger):
        self.os_release_path = os_release_path
        self.logger = logger

    def read_os_release(self) -> Dict[str, str]:
        try:
            with open(self.os_release_path, "r", encoding="utf-8") as file_obj:
                content = file_obj.read()
        except OSError as exc:
            raise UnsupportedHostError(
                actionable_error("os_release_missing", path=self.os_release_path)
            ) from exc

        values: Dict[str, str] = {}
        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, raw_value = line.partition("=")
            try:
                parts = shlex.split(raw_value)
            except ValueError:
                parts = [raw_value.strip("\"'")]
            values[key.strip()] = " ".join(parts)
        return values

    @staticmethod
    def version_major(version_id: str) -> Optional[int]:
        try:
            return version.parse(version_id).major
        except version.InvalidVersion:
            return None

    def match_target(
        self, os_id: str, version_id: str, targets: Iterable[SupportedTarget]
    ) -> Optional[SupportedTarget]:
        major = self.version_major(version_id)
        for target in targets:
            if os_id.lower().startswith(target.id_prefix) and major == target.version_major:
                return target
        return None

    def detect(self, targets: Iterable[SupportedTarget]) -> HostProfile:
        targets = list(targets)
        release = self.read_os_release()
        os_id = release.get("ID", "")
        version_id = release.get("VERSION_ID", "")

        target = self.match_target(os_id, version_id, targets)
        if target is None:
            raise UnsupportedHostError(
                actionable_error(
                    "unsupported_os",
                    os_id=os_id,
                    version_id=version_id,
                    targets=" or ".join(item.label for item in targets),
                )
            )

        profile = HostProfile(
            os_id=os_id,
            version_id=version_id,
            pretty_name=release.get("PRETTY_NAME", f"{os_id} {version_id}"),
            target=target,
        )
        self.logger.info("Detected host: %s (%s)", profile.pretty_name, target.label)
        return profile

    def ensure_root(self):
        if os.geteuid() != 0:
            raise UnsupportedHostError(actionable_error("not_root"))
