"""Filesystem helpers for hostprovisioner."""

import glob
import logging
import os
import shutil
from typing import Iterable, List

from rich.console import Console

from hostprovisioner.errors import ProvisionerError


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def set_permissions(self, path: str, mode: int):
        try:
            os.chmod(path, mode)
        except Exception as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def ensure_dirs(self, paths: Iterable[str], mode: int):
        for path in paths:
            try:
                os.makedirs(path, exist_ok=True)
            except OSError as exc:
                raise ProvisionerError(f"Could not create directory {path}: {exc}") from exc
            self.set_permissions(path, mode)

    def write_file(self, path: str, content: str) -> bool:
        """Writes `content` to `path`; returns False when the file already had it."""
        try:
            if os.path.isfile(path):
                with open(path, "r", encoding="utf-8") as file_obj:
                    if file_obj.read() == content:
                        return False

            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="\n") as file_obj:
                file_obj.write(content)
        except OSError as exc:
            raise ProvisionerError(f"Could not write {path}: {exc}") from exc
        return True

    def expand(self, patterns: Iterable[str]) -> List[str]:
        matches: List[str] = []
        for pattern in patterns:
            for path in sorted(glob.glob(pattern)):
                if path not in matches:
                    matches.append(path)
        return matches

    def remove_paths(self, patterns: Iterable[str]) -> List[str]:
        """Deletes files and trees matching `patterns`; returns what was removed."""
        removed: List[str] = []
        for path in self.expand(patterns):
            try:
                if os.path.isdir(path) and not os.path.islink(path):
                    shutil.rmtree(path)
                else:
                    os.remove(path)
            except OSError as exc:
                message = f"Warning: Could not remove {path}: {exc}"
                self.console.print(f"[yellow]{message}[/yellow]")
                self.logger.warning(message)
                continue
            self.logger.debug("Removed: %s", path)
            removed.append(path)
        return removed
