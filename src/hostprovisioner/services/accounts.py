"""System user/group removal."""

from typing import Callable

from hostprovisioner.errors import CommandError


class AccountService:
    def __init__(self, run_cmd: Callable, logger):
        self.run_cmd = run_cmd
        self.logger = logger

    def _exists(self, database: str, name: str) -> bool:
        result = self.run_cmd(["getent", database, name], check=False, capture_output=True)
        return result.returncode == 0

    def user_exists(self, name: str) -> bool:
        return self._exists("passwd", name)

    def group_exists(self, name: str) -> bool:
        return self._exists("group", name)

    def remove_user(self, name: str, remove_home: bool = False):
        """Deletes the account; its home directory goes too only when asked."""
        if not remove_home:
            self.run_cmd(["userdel", name], capture_output=True)
            return
        try:
            self.run_cmd(["userdel", "-r", name], capture_output=True)
        except CommandError:
            self.run_cmd(["userdel", name], capture_output=True)

    def remove_group(self, name: str):
        self.run_cmd(["groupdel", name], capture_output=True)
