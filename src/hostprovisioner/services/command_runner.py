"""Subprocess execution service for hostprovisioner."""

import os
import subprocess
from typing import Dict, List, Optional

from hostprovisioner.errors import CommandError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, default_timeout: Optional[float] = None):
        self.logger = logger
        self.default_timeout = default_timeout

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
        input: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout
        process_env = None
        if env:
            process_env = dict(os.environ)
            process_env.update(env)

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                timeout=effective_timeout,
                input=input,
                env=process_env,
            )
        except FileNotFoundError as exc:
            raise CommandError(
                f"Required command not found: {cmd[0]}. Please install it and try again.",
                returncode=127,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandError(f"Command timed out after {effective_timeout}s: {cmd_str}") from exc
        except OSError as exc:
            raise CommandError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise CommandError(message, returncode=result.returncode)

        self.logger.debug(message)
        return result
