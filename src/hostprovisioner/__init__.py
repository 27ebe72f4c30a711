"""
hostprovisioner - MySQL 8 and nginx provisioning for Amazon Linux 2023 / RHEL 9
"""

__version__ = "0.1.0"

from .core import ProvisioningRunner
from .errors import ProvisionerError
from .mysql_install import MySQLInstaller
from .mysql_uninstall import MySQLUninstaller
from .nginx_install import NginxInstaller

__all__ = [
    "MySQLInstaller",
    "MySQLUninstaller",
    "NginxInstaller",
    "ProvisionerError",
    "ProvisioningRunner",
]
