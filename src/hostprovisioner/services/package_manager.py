"""dnf/rpm wrapper for hostprovisioner."""

from typing import Callable, Iterable, List, Sequence

from hostprovisioner.errors import CommandError


class PackageManagerService:
    """Wraps the dnf and rpm commands used by the workflows."""

    def __init__(self, run_cmd: Callable, logger):
        self.run_cmd = run_cmd
        self.logger = logger

    def is_installed(self, package: str) -> bool:
        result = self.run_cmd(["rpm", "-q", package], check=False, capture_output=True)
        return result.returncode == 0

    def installed_subset(self, packages: Iterable[str]) -> List[str]:
        return [package for package in packages if self.is_installed(package)]

    def list_installed_matching(self, pattern: str) -> List[str]:
        """Names from `dnf list installed` containing `pattern`, architecture stripped."""
        result = self.run_cmd(["dnf", "list", "installed"], check=False, capture_output=True)
        if result.returncode != 0:
            return []

        names: List[str] = []
        for line in (result.stdout or "").splitlines():
            columns = line.split()
            if not columns or pattern not in columns[0]:
                continue
            name = columns[0].rsplit(".", 1)[0] if "." in columns[0] else columns[0]
            if name not in names:
                names.append(name)
        return names

    def upgrade(self):
        self.run_cmd(["dnf", "-y", "upgrade"])

    def install(self, packages: Sequence[str]):
        self.run_cmd(["dnf", "-y", "install", *packages])

    def local_install(self, rpm_path: str):
        try:
            self.run_cmd(["dnf", "-y", "localinstall", rpm_path])
        except CommandError as exc:
            self.logger.warning("dnf localinstall failed, falling back to rpm -Uvh: %s", exc)
            self.run_cmd(["rpm", "-Uvh", rpm_path])

    def remove(self, packages: Sequence[str]):
        self.run_cmd(["dnf", "-y", "remove", *packages])

    def erase(self, package: str):
        self.run_cmd(["rpm", "-e", package], capture_output=True)

    def import_key(self, key_url: str):
        self.run_cmd(["rpm", "--import", key_url], capture_output=True)

    def set_repo_enabled(self, repo_ids: Sequence[str], enabled: bool):
        flag = "--set-enabled" if enabled else "--set-disabled"
        self.run_cmd(["dnf", "config-manager", flag, *repo_ids], capture_output=True)

    def module_reset(self, module: str):
        self.run_cmd(["dnf", "-y", "module", "reset", module])

    def clean_all(self):
        self.run_cmd(["dnf", "-y", "clean", "all"])

    def makecache(self):
        self.run_cmd(["dnf", "-y", "makecache"])

    def autoremove(self):
        self.run_cmd(["dnf", "-y", "autoremove"])

    def list_gpg_keys(self) -> List[str]:
        result = self.run_cmd(["rpm", "-qa", "gpg-pubkey*"], check=False, capture_output=True)
        if result.returncode != 0:
            return []
        return [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]

    def key_matches(self, key: str, needle: str, url_marker: str) -> bool:
        summary = self.run_cmd(
            ["rpm", "-q", "--qf", "%{NAME} %{SUMMARY}\\n", key],
            check=False,
            capture_output=True,
        )
        if summary.returncode == 0 and needle in (summary.stdout or "").lower():
            return True

        info = self.run_cmd(["rpm", "-qi", key], check=False, capture_output=True)
        return info.returncode == 0 and url_marker in (info.stdout or "").lower()
