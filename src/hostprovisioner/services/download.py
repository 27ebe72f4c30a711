"""Download service with progress reporting."""

import os

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from hostprovisioner.errors import ProvisionerError


class DownloadService:
    """Fetches repository packages over HTTPS."""

    def __init__(self, logger, console, requests_module, timeout: float = 60.0):
        self.logger = logger
        self.console = console
        self.requests = requests_module
        self.timeout = timeout

    def download_file(self, url: str, dest_path: str, description: str = "Downloading..."):
        self.logger.info("Downloading %s to %s", url, dest_path)

        try:
            with self.requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                total_size = int(response.headers.get("Content-Length", 0))

                os.makedirs(os.path.dirname(dest_path) or ".", exist_ok=True)

                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    BarColumn(),
                    TaskProgressColumn(),
                    "•",
                    TimeElapsedColumn(),
                    console=self.console,
                ) as progress:
                    task = progress.add_task(f"[cyan]{description}", total=total_size or None)
                    with open(dest_path, "wb") as file_obj:
                        for chunk in response.iter_content(chunk_size=8192):
                            if not chunk:
                                continue
                            file_obj.write(chunk)
                            progress.update(task, advance=len(chunk))

        except self.requests.RequestException as exc:
            raise ProvisionerError(f"Download failed for {description}: {exc}") from exc
        except OSError as exc:
            raise ProvisionerError(f"Could not write {dest_path}: {exc}") from exc

