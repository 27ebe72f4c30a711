"""nginx install workflow with a custom content root under /opt/custom/nginx."""

import os
import shutil
from typing import Callable

from . import constants
from .core import ProvisioningRunner, console, logger
from .errors import CommandError
from .errors_catalog import actionable_error
from .models import AMAZON_LINUX_2023, RHEL_9, NginxInstallRequest, Outcome
from .services.filesystem import FileSystemService
from .services.firewall import FirewallService
from .services.nginx_site import NginxSiteService
from .services.package_manager import PackageManagerService
from .services.selinux import SELinuxService
from .services.service_manager import ServiceManager


class NginxInstaller(ProvisioningRunner):
    WORKFLOW = "nginx install"
    TARGETS = (AMAZON_LINUX_2023, RHEL_9)

    def __init__(self, request: NginxInstallRequest, which: Callable = shutil.which, **kwargs):
        super().__init__(**kwargs)
        self.request = request
        self.which = which
        self.package_manager = PackageManagerService(self._run_cmd, logger=logger)
        self.service_manager = ServiceManager(self._run_cmd, logger=logger, console=console)
        self.filesystem_service = FileSystemService(logger=logger, console=console)
        self.firewall = FirewallService(self._run_cmd, logger=logger, which=which)
        self.selinux = SELinuxService(self._run_cmd, logger=logger, which=which)
        self.site = NginxSiteService(request.custom_dir)
        self.selinux_enabled = False

    def install_nginx(self):
        if self.which("nginx"):
            return Outcome.skipped("nginx already installed; skipping install.")

        try:
            self.package_manager.install(["nginx"])
        except CommandError:
            logger.warning("dnf install nginx failed. Refreshing metadata and retrying...")
            try:
                self.package_manager.makecache()
            except CommandError as exc:
                logger.debug("makecache failed: %s", exc)
            try:
                self.package_manager.install(["nginx"])
            except CommandError as exc:
                raise CommandError(
                    actionable_error("package_install_failed", package="nginx"),
                    returncode=exc.returncode,
                ) from exc
        return Outcome.ok("nginx installed.")

    def install_selinux_tools(self):
        self.selinux_enabled = self.selinux.is_enabled()
        if not self.selinux_enabled:
            return Outcome.skipped("SELinux disabled or not present.")
        if self.selinux.has_semanage():
            return Outcome.skipped("semanage present; skipping install.")

        package = self.selinux.ensure_semanage(constants.SEMANAGE_PACKAGES, self.package_manager)
        return Outcome.ok(f"semanage provided by {package}.")

    def create_custom_directories(self):
        console.print(f"[blue]Creating custom config directory: {self.site.custom_dir}[/blue]")
        self.filesystem_service.ensure_dirs(
            [self.site.custom_dir, self.site.conf_dir, self.site.html_dir], constants.DIR_MODE
        )

    def set_content_ownership(self):
        custom_dir = self.site.custom_dir
        owner, mode = constants.NGINX_CONTENT_OWNER, constants.NGINX_CONTENT_MODE
        self._run_cmd(["chown", "-R", owner, custom_dir], capture_output=True)
        self._run_cmd(["chmod", "-R", mode, custom_dir], capture_output=True)
        return Outcome.ok(f"{custom_dir} owned by {owner}, mode {mode}.")

    def write_include_dropin(self):
        dropin = self.settings.nginx_include_dropin
        if not self.filesystem_service.write_file(dropin, self.site.render_include()):
            return Outcome.skipped(f"{dropin} unchanged.")
        return Outcome.ok(f"Wrote {dropin}.")

    def write_server_block(self):
        path = self.site.server_block_path
        if not self.filesystem_service.write_file(path, self.site.render_server_block()):
            return Outcome.skipped(f"{path} unchanged.")
        return Outcome.ok(f"Wrote {path}.")

    def write_index_page(self):
        path = self.site.index_path
        if os.path.exists(path):
            return Outcome.skipped(f"Index already exists at {path}; leaving it.")
        self.filesystem_service.write_file(path, self.site.render_index(self.host.target.label))
        return Outcome.ok(f"Created sample index at {path}.")

    def apply_selinux_context(self):
        if not self.selinux_enabled:
            return Outcome.skipped("SELinux disabled or not present.")

        full = self.selinux.apply_file_context(self.site.custom_dir, constants.HTTPD_CONTENT_TYPE)
        if not full:
            return Outcome.degraded(
                "semanage not available; ran restorecon only. If SELinux denies access run: "
                f"semanage fcontext -a -t {constants.HTTPD_CONTENT_TYPE} "
                f"'{self.site.custom_dir}(/.*)?' && restorecon -Rv '{self.site.custom_dir}'"
            )
        return Outcome.ok(f"Labelled {self.site.custom_dir} as {constants.HTTPD_CONTENT_TYPE}.")

    def start_service(self):
        self.service_manager.enable_now(constants.NGINX_SERVICE)

    def configure_firewall(self):
        if not self.request.open_firewall:
            return Outcome.skipped("Firewall changes disabled.")
        if not self.firewall.is_available() or not self.service_manager.is_active("firewalld"):
            return Outcome.skipped(
                "firewalld not active; on EC2 ensure the Security Group allows inbound 80/443."
            )

        for service in constants.NGINX_HTTP_SERVICES:
            self.firewall.add_service(service)
        self.firewall.reload()
        return Outcome.ok(f"Allowed {', '.join(constants.NGINX_HTTP_SERVICES)}.")

    def test_configuration(self):
        try:
            self._run_cmd(["nginx", "-t"], capture_output=True)
        except CommandError as exc:
            raise CommandError(
                f"{actionable_error('nginx_config_invalid')}\n{exc}", returncode=exc.returncode
            ) from exc

    def reload_service(self):
        try:
            self.service_manager.reload(constants.NGINX_SERVICE)
            return Outcome.ok("nginx reloaded.")
        except CommandError:
            logger.warning("Reload failed; attempting restart...")

        try:
            self.service_manager.restart(constants.NGINX_SERVICE)
        except CommandError as exc:
            raise CommandError(
                actionable_error("nginx_reload_failed"), returncode=exc.returncode
            ) from exc
        return Outcome.degraded("Reload failed; nginx restarted instead.")

    def execute(self):
        console.print(
            f"[bold blue]Running nginx install + custom config for {self.host.target.label}[/bold blue]"
        )

        self._run_step("install_nginx", self.install_nginx)
        self._run_step("install_selinux_tools", self.install_selinux_tools, advisory=True)
        self._run_step("create_custom_directories", self.create_custom_directories)
        self._run_step("set_content_ownership", self.set_content_ownership, advisory=True)
        self._run_step("write_include_dropin", self.write_include_dropin)
        self._run_step("write_server_block", self.write_server_block)
        self._run_step("write_index_page", self.write_index_page)
        self._run_step("apply_selinux_context", self.apply_selinux_context, advisory=True)
        self._run_step("start_service", self.start_service, advisory=True)
        self._run_step("configure_firewall", self.configure_firewall, advisory=True)
        self._run_step("test_configuration", self.test_configuration)
        self._run_step("reload_service", self.reload_service)

        self.report_service.observe("Custom files", self.site.custom_dir)
        self.report_service.observe(
            "Access", "port 80 (ensure the EC2 Security Group allows inbound TCP:80)."
        )
