"""MySQL 8 community server install workflow."""

import os
import tempfile
from typing import List

import requests

from . import constants
from .core import ProvisioningRunner, console, logger
from .errors import CommandError, ProvisionerError
from .errors_catalog import actionable_error
from .models import AMAZON_LINUX_2023, RHEL_9, MySQLInstallRequest, Outcome
from .services.download import DownloadService
from .services.firewall import FirewallService
from .services.mysql_admin import MySQLAdminService
from .services.mysql_config import MySQLConfigService
from .services.package_manager import PackageManagerService
from .services.service_manager import ServiceManager


def mask(secret: str) -> str:
    return "*" * len(secret)


class MySQLInstaller(ProvisioningRunner):
    WORKFLOW = "MySQL install"
    TARGETS = (AMAZON_LINUX_2023, RHEL_9)

    def __init__(self, request: MySQLInstallRequest, **kwargs):
        super().__init__(**kwargs)
        self.request = request
        self.package_manager = PackageManagerService(self._run_cmd, logger=logger)
        self.service_manager = ServiceManager(self._run_cmd, logger=logger, console=console)
        self.mysql_admin = MySQLAdminService(self._run_cmd, logger=logger)
        self.mysql_config = MySQLConfigService(logger=logger)
        self.firewall = FirewallService(self._run_cmd, logger=logger)
        self.download_service = DownloadService(
            logger=logger,
            console=console,
            requests_module=requests,
            timeout=self.settings.download_timeout,
        )

    def system_upgrade(self):
        if not self.settings.system_upgrade:
            return Outcome.skipped("System upgrade disabled by configuration.")
        self.package_manager.upgrade()

    def install_prerequisites(self):
        self.package_manager.install(list(constants.MYSQL_PREREQUISITES))

    def install_repository(self):
        if self.package_manager.is_installed(constants.MYSQL_REPO_PACKAGE):
            return Outcome.skipped(f"{constants.MYSQL_REPO_PACKAGE} already installed.")

        console.print("[blue]Downloading MySQL EL9 repo RPM...[/blue]")
        with tempfile.TemporaryDirectory(prefix="hostprovisioner-") as temp_dir:
            rpm_path = os.path.join(temp_dir, "mysql80-el9.rpm")
            try:
                self.download_service.download_file(
                    constants.MYSQL_REPO_RPM_URL, rpm_path, "Downloading MySQL repo RPM..."
                )
                console.print("[blue]Installing MySQL repo RPM...[/blue]")
                self.package_manager.local_install(rpm_path)
            except CommandError as exc:
                raise CommandError(
                    actionable_error("repository_install_failed", url=constants.MYSQL_REPO_RPM_URL),
                    returncode=exc.returncode,
                ) from exc
            except ProvisionerError as exc:
                raise ProvisionerError(
                    f"{actionable_error('repository_install_failed', url=constants.MYSQL_REPO_RPM_URL)} ({exc})"
                ) from exc
        return Outcome.ok(f"Installed {constants.MYSQL_REPO_PACKAGE}.")

    def import_gpg_keys(self):
        failed: List[str] = []
        for key_url in constants.MYSQL_GPG_KEY_URLS:
            try:
                self.package_manager.import_key(key_url)
            except CommandError as exc:
                logger.debug("Key import failed for %s: %s", key_url, exc)
                failed.append(key_url)

        if failed:
            return Outcome.degraded(f"Could not import: {', '.join(failed)}")
        return Outcome.ok(f"Imported {len(constants.MYSQL_GPG_KEY_URLS)} MySQL GPG keys.")

    def configure_repositories(self):
        if self.host and self.host.target == RHEL_9:
            self.package_manager.module_reset("mysql")
        self.package_manager.set_repo_enabled([constants.MYSQL_REPO_ID], enabled=True)
        try:
            self.package_manager.set_repo_enabled(constants.MYSQL_LEGACY_REPO_IDS, enabled=False)
        except CommandError as exc:
            logger.debug("Legacy MySQL repositories not present: %s", exc)

    def refresh_metadata(self):
        self.package_manager.clean_all()
        self.package_manager.makecache()

    def install_server_package(self):
        if self.package_manager.is_installed(constants.MYSQL_SERVER_PACKAGE):
            return Outcome.skipped(f"{constants.MYSQL_SERVER_PACKAGE} already installed.")

        console.print("[blue]Installing mysql-community-server (MySQL 8.0)...[/blue]")
        try:
            self.package_manager.install([constants.MYSQL_SERVER_PACKAGE])
        except CommandError as exc:
            raise CommandError(
                actionable_error("package_install_failed", package=constants.MYSQL_SERVER_PACKAGE),
                returncode=exc.returncode,
            ) from exc
        return Outcome.ok(f"Installed {constants.MYSQL_SERVER_PACKAGE}.")

    def start_service(self):
        self.service_manager.enable_now(constants.MYSQL_SERVICE)

    def wait_for_service(self):
        ready = self.service_manager.wait_until_ready(
            self.mysql_admin.ping,
            constants.MYSQL_SERVICE,
            max_retries=self.settings.readiness_retries,
            interval_seconds=self.settings.readiness_interval_seconds,
        )
        if not ready:
            return Outcome.degraded(
                f"{constants.MYSQL_SERVICE} did not answer ping after "
                f"{self.settings.readiness_retries} attempts; continuing."
            )
        return Outcome.ok(f"{constants.MYSQL_SERVICE} is accepting connections.")

    def bootstrap_root_credentials(self):
        console.print("[blue]Configuring MySQL root account and basic security...[/blue]")
        result = self.mysql_admin.bootstrap_root(
            self.request.root_password, self.settings.mysqld_log_path
        )
        if not result.verified:
            return Outcome.degraded(result.message)
        if not result.applied:
            return Outcome.skipped(result.message)
        return Outcome.ok(result.message)

    def create_application_database(self):
        console.print(
            f"[blue]Creating database '{self.request.db_name}' and user "
            f"'{self.request.db_user}'@'{self.request.user_host}'...[/blue]"
        )
        self.mysql_admin.create_database_and_user(self.request)
        return Outcome.ok(
            f"Database {self.request.db_name} granted to "
            f"{self.request.db_user}@{self.request.user_host}."
        )

    def configure_bind_address(self):
        address = self.request.bind_address
        changed = self.mysql_config.set_bind_address(self.settings.mysql_config_path, address)
        if not changed:
            return Outcome.skipped(f"bind-address already {address}.")

        try:
            self.service_manager.restart(constants.MYSQL_SERVICE)
        except CommandError as exc:
            return Outcome.degraded(f"bind-address set to {address} but restart failed: {exc}")
        return Outcome.ok(f"bind-address = {address}; {constants.MYSQL_SERVICE} restarted.")

    def configure_firewall(self):
        if not self.firewall.is_available():
            return Outcome.skipped("firewall-cmd not found.")

        if self.request.allow_remote:
            self.firewall.add_port(constants.MYSQL_PORT)
            message = f"Opened {constants.MYSQL_PORT}/tcp."
        else:
            try:
                self.firewall.remove_port(constants.MYSQL_PORT)
            except CommandError as exc:
                logger.debug("Port %s was not open: %s", constants.MYSQL_PORT, exc)
            message = f"Closed {constants.MYSQL_PORT}/tcp."
        self.firewall.reload()
        return Outcome.ok(message)

    def execute(self):
        console.print(f"[bold blue]Installing MySQL 8 on {self.host.target.label}...[/bold blue]")
        logger.info(
            "DB: %s  USER: %s  REMOTE: %s",
            self.request.db_name,
            self.request.db_user,
            "yes" if self.request.allow_remote else "no",
        )

        self._run_step("system_upgrade", self.system_upgrade, advisory=True)
        self._run_step("install_prerequisites", self.install_prerequisites, advisory=True)
        self._run_step("install_repository", self.install_repository)
        self._run_step("import_gpg_keys", self.import_gpg_keys, advisory=True)
        self._run_step("configure_repositories", self.configure_repositories, advisory=True)
        self._run_step("refresh_metadata", self.refresh_metadata, advisory=True)
        self._run_step("install_server_package", self.install_server_package)
        self._run_step("start_service", self.start_service)
        self._run_step("wait_for_service", self.wait_for_service)
        self._run_step("bootstrap_root_credentials", self.bootstrap_root_credentials, advisory=True)
        self._run_step("create_application_database", self.create_application_database)
        self._run_step("configure_bind_address", self.configure_bind_address)
        self._run_step("configure_firewall", self.configure_firewall, advisory=True)
        self._add_observations()

    def _add_observations(self):
        request = self.request
        self.report_service.observe("Root login", "mysql -u root -p")
        self.report_service.observe("Root Pass", mask(request.root_password))
        self.report_service.observe("DB Name", request.db_name)
        self.report_service.observe("DB User", f"{request.db_user}@{request.user_host}")
        self.report_service.observe("DB Pass", mask(request.db_password))
        config_path = self.settings.mysql_config_path
        effective = self.mysql_config.read_bind_address(config_path)
        self.report_service.observe("Bind address", f"{effective or 'not set'} ({config_path})")
        if request.allow_remote:
            self.report_service.observe(
                "Remote access",
                f"enabled. Ensure your EC2 Security Group allows TCP/{constants.MYSQL_PORT} "
                "from trusted IPs only.",
            )
            self.report_service.observe(
                "Remote test",
                f"mysql -h <EC2-PUBLIC-IP> -u {request.db_user} -p {request.db_name}",
            )
        else:
            self.report_service.observe(
                "Remote access",
                f"disabled (bind-address {request.bind_address}, user host {request.user_host}).",
            )
        self.report_service.observe(
            "Local test", f"mysql -u {request.db_user} -p {request.db_name}"
        )
