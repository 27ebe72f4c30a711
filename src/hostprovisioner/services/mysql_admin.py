"""MySQL administrative SQL: readiness, root bootstrap and application grants."""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from hostprovisioner.errors import CommandError
from hostprovisioner.models import MySQLInstallRequest


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def quote_literal(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


@dataclass(frozen=True)
class BootstrapResult:
    """How the permanent root credential was (or was not) applied."""

    method: str
    applied: bool
    verified: bool
    message: str


class MySQLAdminService:
    """Talks to the local server through the `mysql` and `mysqladmin` clients."""

    TEMPORARY_PASSWORD_PATTERN = re.compile(r"temporary password", re.IGNORECASE)

    METHOD_EXISTING = "existing_credential"
    METHOD_TEMPORARY = "temporary_password"
    METHOD_SOCKET = "socket_auth"
    METHOD_FALLBACK = "unauthenticated_fallback"

    def __init__(self, run_cmd: Callable, logger):
        self.run_cmd = run_cmd
        self.logger = logger

    def _mysql(
        self,
        sql: str,
        password: Optional[str] = None,
        connect_expired: bool = False,
        check: bool = True,
    ):
        cmd = ["mysql", "-u", "root"]
        if connect_expired:
            cmd.append("--connect-expired-password")
        env = {"MYSQL_PWD": password} if password else None
        return self.run_cmd(cmd, check=check, capture_output=True, input=sql, env=env)

    def ping(self) -> bool:
        result = self.run_cmd(["mysqladmin", "ping"], check=False, capture_output=True)
        return result.returncode == 0

    def find_temporary_password(self, log_path: str) -> Optional[str]:
        """Returns the last token of the last `temporary password` line in the mysqld log."""
        try:
            with open(log_path, "r", encoding="utf-8", errors="replace") as file_obj:
                lines = [line for line in file_obj if self.TEMPORARY_PASSWORD_PATTERN.search(line)]
        except OSError:
            return None

        if not lines:
            return None
        tokens = lines[-1].split()
        return tokens[-1] if tokens else None

    def credential_works(self, password: Optional[str]) -> bool:
        result = self._mysql("SELECT 1;", password=password, check=False)
        return result.returncode == 0

    @staticmethod
    def build_secure_sql(root_password: str) -> str:
        statements = [
            f"ALTER USER 'root'@'localhost' IDENTIFIED BY {quote_literal(root_password)};",
            "DELETE FROM mysql.user WHERE User='';",
            "DROP USER IF EXISTS 'root'@'%';",
            "DROP DATABASE IF EXISTS test;",
            "DELETE FROM mysql.db WHERE Db='test' OR Db LIKE 'test\\_%';",
            "FLUSH PRIVILEGES;",
        ]
        return "\n".join(statements) + "\n"

    @staticmethod
    def build_application_sql(request: MySQLInstallRequest) -> str:
        database = quote_identifier(request.db_name)
        account = f"{quote_literal(request.db_user)}@{quote_literal(request.user_host)}"
        statements = [
            f"CREATE DATABASE IF NOT EXISTS {database};",
            f"CREATE USER IF NOT EXISTS {account} IDENTIFIED BY {quote_literal(request.db_password)};",
            f"GRANT ALL PRIVILEGES ON {database}.* TO {account};",
            "FLUSH PRIVILEGES;",
        ]
        return "\n".join(statements) + "\n"

    def _apply(self, sql: str, password: Optional[str], connect_expired: bool) -> bool:
        result = self._mysql(sql, password=password, connect_expired=connect_expired, check=False)
        if result.returncode != 0:
            self.logger.debug("Secure SQL was rejected: %s", (result.stderr or "").strip())
        return result.returncode == 0

    def bootstrap_root(self, root_password: str, log_path: str) -> BootstrapResult:
        """Sets the permanent root credential; the first strategy that succeeds wins."""
        if self.credential_works(root_password):
            return BootstrapResult(
                self.METHOD_EXISTING,
                applied=False,
                verified=True,
                message="Root credential already set; nothing to change.",
            )

        secure_sql = self.build_secure_sql(root_password)

        temporary_password = self.find_temporary_password(log_path)
        if temporary_password:
            self.logger.info(
                "Using temporary root password from %s to set the root password...", log_path
            )
            if self._apply(secure_sql, temporary_password, connect_expired=True):
                return BootstrapResult(
                    self.METHOD_TEMPORARY,
                    applied=True,
                    verified=True,
                    message=f"Root password set using the temporary password from {log_path}.",
                )

        if self.credential_works(None):
            self.logger.info("Socket/no-password root access works; applying secure SQL...")
            if self._apply(secure_sql, None, connect_expired=False):
                return BootstrapResult(
                    self.METHOD_SOCKET,
                    applied=True,
                    verified=True,
                    message="Root password set through passwordless local access.",
                )

        self.logger.warning(
            "No temporary password and socket access failed; attempting best-effort secure SQL."
        )
        self._apply(secure_sql, None, connect_expired=True)
        if self.credential_works(root_password):
            return BootstrapResult(
                self.METHOD_FALLBACK,
                applied=True,
                verified=True,
                message="Root password set by the unauthenticated fallback.",
            )
        return BootstrapResult(
            self.METHOD_FALLBACK,
            applied=False,
            verified=False,
            message=(
                "Root password may not have been applied: no temporary password, socket "
                "access failed and the fallback could not be verified."
            ),
        )

    def create_database_and_user(self, request: MySQLInstallRequest):
        try:
            self._mysql(self.build_application_sql(request), password=request.root_password)
        except CommandError as exc:
            raise CommandError(
                f"Could not create database '{request.db_name}' and user '{request.db_user}': {exc}",
                returncode=exc.returncode,
            ) from exc

