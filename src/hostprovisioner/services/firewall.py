"""firewalld rule toggles."""

import shutil
from typing import Callable


class FirewallService:
    """Opens and closes firewalld ports/services; callers treat failures as advisory."""

    def __init__(self, run_cmd: Callable, logger, which: Callable = shutil.which):
        self.run_cmd = run_cmd
        self.logger = logger
        self.which = which

    def is_available(self) -> bool:
        return self.which("firewall-cmd") is not None

    def add_port(self, port: int, protocol: str = "tcp"):
        self.run_cmd(["firewall-cmd", "--permanent", f"--add-port={port}/{protocol}"])

    def remove_port(self, port: int, protocol: str = "tcp"):
        self.run_cmd(
            ["firewall-cmd", "--permanent", f"--remove-port={port}/{protocol}"],
            capture_output=True,
        )

    def add_service(self, service: str):
        self.run_cmd(["firewall-cmd", "--permanent", f"--add-service={service}"])

    def reload(self):
        self.run_cmd(["firewall-cmd", "--reload"])
