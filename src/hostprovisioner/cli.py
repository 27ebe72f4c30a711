import logging
import os

import click
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_FILE, DEFAULT_ROOT_PASSWORD
from .errors import ProvisionerError
from .models import (
    MySQLInstallRequest,
    NginxInstallRequest,
    UninstallOptions,
    parse_allow_remote,
)
from .mysql_install import MySQLInstaller
from .mysql_uninstall import MySQLUninstaller
from .nginx_install import NginxInstaller
from .services.config_loader import ConfigLoader
from .settings import Settings

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--report-file",
    type=click.Path(),
    help="Write a JSON report of every step outcome to this path.",
)
@click.pass_context
def main(ctx, config, verbose, log_file, report_file):
    """Install, configure and uninstall MySQL 8 and nginx on Amazon Linux 2023 / RHEL 9."""
    logger = logging.getLogger("hostprovisioner")

    try:
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = ConfigLoader().load(resolved_config)
        verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
        log_file = _resolve_option(log_file, config_values, "log_file")
        config_values["report_file"] = _resolve_option(report_file, config_values, "report_file")
        settings = Settings.from_mapping(config_values)
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    ctx.obj = {"settings": settings}


@main.command("install-mysql", context_settings=CONTEXT_SETTINGS)
@click.argument("db_name")
@click.argument("db_user")
@click.argument("db_password")
@click.argument("root_password", required=False, default=DEFAULT_ROOT_PASSWORD)
@click.argument("allow_remote", required=False, default="no")
@click.pass_obj
def install_mysql(obj, db_name, db_user, db_password, root_password, allow_remote):
    """Install MySQL 8 and create DB_NAME owned by DB_USER.

    ALLOW_REMOTE accepts yes/true/1 to bind on all interfaces and open 3306/tcp.
    """
    request = MySQLInstallRequest(
        db_name=db_name,
        db_user=db_user,
        db_password=db_password,
        root_password=root_password,
        allow_remote=parse_allow_remote(allow_remote),
    )
    installer = MySQLInstaller(request, settings=obj["settings"])
    raise SystemExit(installer.run())


@main.command("uninstall-mysql", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--purge-data",
    is_flag=True,
    help="Remove the MySQL data directory and /etc/my.cnf* AFTER backing up (destructive).",
)
@click.option(
    "--remove-keys", is_flag=True, help="Attempt to remove imported MySQL GPG keys (best-effort)."
)
@click.option("--yes", "assume_yes", is_flag=True, help="Skip interactive confirmation prompts.")
@click.pass_obj
def uninstall_mysql(obj, purge_data, remove_keys, assume_yes):
    """Cleanly uninstall MySQL 8, backing up data and config first."""
    options = UninstallOptions(
        purge_data=purge_data,
        remove_keys=remove_keys,
        assume_yes=assume_yes,
    )
    uninstaller = MySQLUninstaller(options, settings=obj["settings"])
    raise SystemExit(uninstaller.run())


@main.command("install-nginx", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--custom-dir",
    type=click.Path(),
    default=None,
    help="Custom nginx root holding conf.d/ and html/ (default: /opt/custom/nginx).",
)
@click.option("--no-firewall", is_flag=True, help="Do not add firewalld http/https services.")
@click.pass_obj
def install_nginx(obj, custom_dir, no_firewall):
    """Install nginx and serve a minimal site from a custom directory."""
    settings = obj["settings"]
    request = NginxInstallRequest(
        custom_dir=custom_dir or settings.nginx_custom_dir,
        open_firewall=not no_firewall,
    )
    installer = NginxInstaller(request, settings=settings)
    raise SystemExit(installer.run())


def run():
    """Console entry point; usage errors exit with 1 like other precondition failures."""
    try:
        main(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        raise SystemExit(1) from exc
    except click.Abort:
        click.echo("Aborted!", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    run()
