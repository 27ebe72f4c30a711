"""MySQL 8 uninstall workflow."""

import os
import shutil
from typing import Callable, List

from . import constants
from .core import ProvisioningRunner, console, logger
from .errors import CommandError
from .errors_catalog import actionable_error
from .models import AMAZON_LINUX_2023, RHEL_9, Outcome, UninstallOptions
from .services.accounts import AccountService
from .services.archive import ArchiveService
from .services.filesystem import FileSystemService
from .services.package_manager import PackageManagerService
from .services.service_manager import ServiceManager

DATA_DIR_ABSENT = "Data dir removed or not present."


class MySQLUninstaller(ProvisioningRunner):
    WORKFLOW = "MySQL uninstall"
    TARGETS = (AMAZON_LINUX_2023, RHEL_9)

    def __init__(self, options: UninstallOptions, which: Callable = shutil.which, **kwargs):
        super().__init__(**kwargs)
        self.options = options
        self.which = which
        self.backup_file = None
        self.data_purged = False
        self.package_manager = PackageManagerService(self._run_cmd, logger=logger)
        self.service_manager = ServiceManager(self._run_cmd, logger=logger, console=console)
        self.archive_service = ArchiveService()
        self.filesystem_service = FileSystemService(logger=logger, console=console)
        self.account_service = AccountService(self._run_cmd, logger=logger)
        self.backup_path = self.archive_service.backup_path(self.settings.backup_dir, "mysql-backup")

    @property
    def config_patterns(self) -> List[str]:
        return [self.settings.mysql_config_path + "*", self.settings.mysql_config_dir]

    def stop_service(self):
        console.print("[blue]Stopping and disabling mysqld service...[/blue]")
        failures = []
        for action in (self.service_manager.stop, self.service_manager.disable):
            try:
                action(constants.MYSQL_SERVICE)
            except CommandError as exc:
                failures.append(str(exc).splitlines()[0])
        if failures:
            return Outcome.skipped("; ".join(failures))
        return Outcome.ok(f"{constants.MYSQL_SERVICE} stopped and disabled.")

    def backup(self):
        console.print(
            f"[blue]Creating backup of MySQL data and config (if present) -> {self.backup_path}[/blue]"
        )
        paths = [
            self.settings.mysql_data_dir,
            self.settings.mysql_config_path,
            self.settings.mysql_config_dir,
        ]
        archive = self.archive_service.create_backup(self.backup_path, paths)
        if archive is None:
            return Outcome.skipped("No MySQL data/config found to backup.")
        self.backup_file = archive
        return Outcome.ok(f"Backup completed: {archive}")

    def remove_packages(self):
        console.print("[blue]Removing MySQL packages via dnf...[/blue]")
        packages = self.package_manager.installed_subset(constants.MYSQL_PACKAGES)
        for name in self.package_manager.list_installed_matching(constants.MYSQL_PACKAGE_PATTERN):
            if name not in packages:
                packages.append(name)

        if not packages:
            return Outcome.skipped("No mysql-community packages installed.")

        try:
            self.package_manager.remove(packages)
        except CommandError as exc:
            raise CommandError(
                actionable_error("package_removal_failed", packages=" ".join(packages)),
                returncode=exc.returncode,
            ) from exc
        return Outcome.ok(f"Removed: {' '.join(packages)}")

    def remove_repository(self):
        removed_package = False
        if self.package_manager.is_installed(constants.MYSQL_REPO_PACKAGE):
            try:
                self.package_manager.remove([constants.MYSQL_REPO_PACKAGE])
            except CommandError:
                self.package_manager.erase(constants.MYSQL_REPO_PACKAGE)
            removed_package = True

        repo_files = os.path.join(self.settings.yum_repos_dir, constants.MYSQL_REPO_FILE_PATTERN)
        removed_files = self.filesystem_service.remove_paths([repo_files])
        if not removed_package and not removed_files:
            return Outcome.skipped("MySQL repository not present.")
        return Outcome.ok(f"Removed {constants.MYSQL_REPO_PACKAGE} and repo files.")

    def purge_data(self):
        if not self.options.purge_data:
            return Outcome.skipped(
                "Data/config left in place. Remove with --purge-data if you want to delete them."
            )

        if not self.options.assume_yes:
            prompt = (
                f"Purge MySQL data ({self.settings.mysql_data_dir}) and configs "
                f"({' '.join(self.config_patterns)})? This is destructive."
            )
            if not self.confirm(prompt):
                return Outcome.skipped("Skipping purge of data/config.")

        console.print("[blue]Purging data and configs...[/blue]")
        removed = self.filesystem_service.remove_paths(
            [self.settings.mysql_data_dir, *self.config_patterns]
        )
        self.data_purged = True
        return Outcome.ok(f"Data/config purge complete ({len(removed)} path(s) removed).")

    def remove_system_account(self):
        name = constants.MYSQL_SYSTEM_ACCOUNT
        actions = []
        if self.account_service.user_exists(name):
            self.account_service.remove_user(name, remove_home=self.data_purged)
            actions.append("user")
        if self.account_service.group_exists(name):
            self.account_service.remove_group(name)
            actions.append("group")
        if not actions:
            return Outcome.skipped(f"No {name} system user or group.")
        return Outcome.ok(f"Removed {name} system {' and '.join(actions)}.")

    def remove_gpg_keys(self):
        if not self.options.remove_keys:
            return Outcome.skipped("GPG keys not removed. Rerun with --remove-keys to attempt removal.")

        removed = []
        for key in self.package_manager.list_gpg_keys():
            if not self.package_manager.key_matches(key, "mysql", "repo.mysql.com"):
                continue
            try:
                self.package_manager.erase(key)
            except CommandError as exc:
                logger.warning("Could not remove RPM GPG key %s: %s", key, exc)
                continue
            console.print(f"Removing RPM GPG key: {key}")
            removed.append(key)

        if not removed:
            return Outcome.skipped("No MySQL GPG keys found.")
        return Outcome.ok(f"Removed: {' '.join(removed)}")

    def clean_package_cache(self):
        self.package_manager.autoremove()
        self.package_manager.clean_all()

    def verify(self):
        if self.service_manager.unit_file_present(constants.MYSQL_SERVICE):
            self.report_service.observe("mysqld unit", "still present (may be residual).")
        else:
            self.report_service.observe("mysqld unit", "not present.")

        mysql_binary = self.which("mysql")
        if mysql_binary:
            self.report_service.observe("mysql binary", f"still in PATH: {mysql_binary}")
        else:
            self.report_service.observe("mysql binary", "mysql client binary removed.")

        if os.path.isdir(self.settings.mysql_data_dir):
            self.report_service.observe(
                "Data dir", f"Data dir still present: {self.settings.mysql_data_dir}"
            )
        else:
            self.report_service.observe("Data dir", DATA_DIR_ABSENT)

        self.report_service.observe("Backup", self.backup_file or "not created")

    def execute(self):
        console.print(
            f"[bold blue]MySQL 8 uninstall helper for {self.host.target.label}[/bold blue]"
        )
        logger.info("Backup path will be: %s", self.backup_path)
        logger.info(
            "Options: purge-data=%s, remove-keys=%s, assume-yes=%s",
            int(self.options.purge_data),
            int(self.options.remove_keys),
            int(self.options.assume_yes),
        )
        self.require_confirmation(
            "Proceed with uninstall of MySQL packages?", self.options.assume_yes
        )

        self._run_step("stop_service", self.stop_service, advisory=True)
        self._run_step("backup", self.backup, advisory=True)
        self._run_step("remove_packages", self.remove_packages)
        self._run_step("remove_repository", self.remove_repository, advisory=True)
        self._run_step("purge_data", self.purge_data)
        self._run_step("remove_system_account", self.remove_system_account, advisory=True)
        self._run_step("remove_gpg_keys", self.remove_gpg_keys, advisory=True)
        self._run_step("clean_package_cache", self.clean_package_cache, advisory=True)
        self.verify()
