"""systemd service lifecycle helpers."""

import time
from typing import Callable


class ServiceManager:
    """Manages systemd units and the readiness poll."""

    def __init__(self, run_cmd: Callable, logger, console):
        self.run_cmd = run_cmd
        self.logger = logger
        self.console = console

    def enable_now(self, unit: str):
        self.run_cmd(["systemctl", "enable", "--now", unit])

    def stop(self, unit: str):
        self.run_cmd(["systemctl", "stop", unit], capture_output=True)

    def disable(self, unit: str):
        self.run_cmd(["systemctl", "disable", unit], capture_output=True)

    def restart(self, unit: str):
        self.run_cmd(["systemctl", "restart", unit])

    def reload(self, unit: str):
        self.run_cmd(["systemctl", "reload", unit])

    def is_active(self, unit: str) -> bool:
        result = self.run_cmd(
            ["systemctl", "is-active", "--quiet", unit], check=False, capture_output=True
        )
        return result.returncode == 0

    def unit_file_present(self, unit: str) -> bool:
        result = self.run_cmd(["systemctl", "list-unit-files"], check=False, capture_output=True)
        return unit.lower() in (result.stdout or "").lower()

    def wait_until_ready(
        self,
        probe: Callable[[], bool],
        description: str,
        max_retries: int,
        interval_seconds: float,
    ) -> bool:
        """Polls `probe` up to `max_retries` times; returns False when the budget runs out."""
        self.console.print(f"[yellow]Waiting for {description} to become available...[/yellow]")

        for attempt in range(1, max_retries + 1):
            if probe():
                self.console.print(f"[green]{description} is up (attempt {attempt}).[/green]")
                return True
            self.logger.info(
                "%s not ready yet (attempt %s/%s). Sleeping %ss...",
                description,
                attempt,
                max_retries,
                interval_seconds,
            )
            time.sleep(interval_seconds)

        return False
