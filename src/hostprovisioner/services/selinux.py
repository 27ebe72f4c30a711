"""SELinux helpers: mode detection, semanage provisioning and file contexts."""

import shutil
from typing import Callable, Sequence

from hostprovisioner.errors import CommandError


class SELinuxService:
    """Best-effort SELinux tooling used when serving content from custom paths."""

    def __init__(self, run_cmd: Callable, logger, which: Callable = shutil.which):
        self.run_cmd = run_cmd
        self.logger = logger
        self.which = which

    def is_enabled(self) -> bool:
        if self.which("getenforce") is None:
            return False
        result = self.run_cmd(["getenforce"], check=False, capture_output=True)
        if result.returncode != 0:
            return False
        return (result.stdout or "").strip() != "Disabled"

    def has_semanage(self) -> bool:
        return self.which("semanage") is not None

    def ensure_semanage(self, packages: Sequence[str], package_manager) -> str:
        """Returns the package that provides semanage, installing the first one that works."""
        for package in packages:
            if package_manager.is_installed(package):
                return package

        for package in packages:
            self.logger.info("Attempting to install SELinux helper package: %s", package)
            try:
                package_manager.install([package])
            except CommandError as exc:
                self.logger.debug("Could not install %s: %s", package, exc)
                continue
            return package

        raise CommandError(
            "Could not install semanage helper packages. SELinux file context changes may be incomplete."
        )

    def apply_file_context(self, directory: str, context_type: str) -> bool:
        """Labels `directory` recursively; returns False when only restorecon could run."""
        with_semanage = self.has_semanage()
        if with_semanage:
            self.run_cmd(
                ["semanage", "fcontext", "-a", "-t", context_type, f"{directory}(/.*)?"],
                check=False,
                capture_output=True,
            )
        self.run_cmd(["restorecon", "-Rv", directory], capture_output=True)
        return with_semanage
