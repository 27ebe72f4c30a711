"""Backup archive creation for hostprovisioner."""

import os
import tarfile
from datetime import datetime
from typing import Iterable, List, Optional

from hostprovisioner.errors import ProvisionerError


class ArchiveService:
    """Creates timestamped compressed backups of service state."""

    def backup_path(self, backup_dir: str, prefix: str, now: Optional[datetime] = None) -> str:
        timestamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
        return os.path.join(backup_dir, f"{prefix}-{timestamp}.tar.gz")

    def existing_paths(self, paths: Iterable[str]) -> List[str]:
        return [path for path in paths if os.path.exists(path)]

    def create_backup(self, archive_path: str, paths: Iterable[str]) -> Optional[str]:
        """Writes a gzip tarball of the existing `paths`; returns None when nothing exists."""
        members = self.existing_paths(paths)
        if not members:
            return None

        try:
            os.makedirs(os.path.dirname(archive_path) or ".", exist_ok=True)
            with tarfile.open(archive_path, "w:gz") as archive:
                for member in members:
                    archive.add(member, arcname=member.lstrip(os.sep))
        except (OSError, tarfile.TarError) as exc:
            raise ProvisionerError(
                f"Backup failed: {exc}. Continuing anyway but you may want to check {archive_path}."
            ) from exc

        return archive_path
