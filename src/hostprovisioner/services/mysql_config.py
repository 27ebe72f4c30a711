"""Editing of the `bind-address` setting in my.cnf."""

import os
import re
from typing import List, Optional

from hostprovisioner.errors import ProvisionerError

BIND_ADDRESS_LINE = re.compile(r"^\s*bind-address\b")
MYSQLD_SECTION = re.compile(r"^\[mysqld\]\s*$")


class MySQLConfigService:
    """Keeps a single `bind-address` line under `[mysqld]`."""

    def __init__(self, logger):
        self.logger = logger

    @staticmethod
    def render_bind_address(content: str, address: str) -> str:
        setting = f"bind-address = {address}"
        lines: List[str] = content.splitlines()

        if any(BIND_ADDRESS_LINE.match(line) for line in lines):
            lines = [setting if BIND_ADDRESS_LINE.match(line) else line for line in lines]
        else:
            section_index = next(
                (index for index, line in enumerate(lines) if MYSQLD_SECTION.match(line)), None
            )
            if section_index is None:
                lines.extend(["[mysqld]", setting])
            else:
                lines.insert(section_index + 1, setting)

        return "\n".join(lines) + "\n"

    def read_bind_address(self, config_path: str) -> Optional[str]:
        if not os.path.exists(config_path):
            return None
        try:
            with open(config_path, "r", encoding="utf-8") as file_obj:
                for line in file_obj:
                    if BIND_ADDRESS_LINE.match(line):
                        return line.split("=", 1)[-1].strip()
        except OSError as exc:
            raise ProvisionerError(f"Could not read {config_path}: {exc}") from exc
        return None

    def set_bind_address(self, config_path: str, address: str) -> bool:
        """Writes the setting and returns True when the file content changed."""
        try:
            current = ""
            if os.path.exists(config_path):
                with open(config_path, "r", encoding="utf-8") as file_obj:
                    current = file_obj.read()

            updated = self.render_bind_address(current, address)
            if updated == current:
                self.logger.debug("bind-address already set to %s in %s", address, config_path)
                return False

            with open(config_path, "w", encoding="utf-8", newline="\n") as file_obj:
                file_obj.write(updated)
        except OSError as exc:
            raise ProvisionerError(f"Could not update {config_path}: {exc}") from exc

        self.logger.info("Set bind-address = %s in %s", address, config_path)
        return True
