import logging
from typing import Callable, List, Optional, Sequence

import click
from rich.console import Console

from .errors import AbortedByUser, ProvisionerError
from .models import HostProfile, Outcome, Report, StepStatus, SupportedTarget
from .services.command_runner import CommandRunner
from .services.host import HostService
from .services.report import ReportService
from .settings import Settings

console = Console()
logger = logging.getLogger("hostprovisioner")


def prompt_confirm(prompt: str) -> bool:
    return click.confirm(prompt, default=False)


class ProvisioningRunner:
    """Runs an ordered list of idempotent steps and reports their outcomes.

    Subclasses declare `WORKFLOW`, `TARGETS` and implement `execute()`, calling
    `_run_step()` for each step. Advisory steps log and continue on
    `ProvisionerError`; fatal steps record the failure and abort the run.
    """

    WORKFLOW = "provisioning"
    TARGETS: Sequence[SupportedTarget] = ()

    def __init__(
        self,
        settings: Optional[Settings] = None,
        command_runner: Optional[CommandRunner] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.settings = settings or Settings()
        self.command_runner = command_runner or CommandRunner(
            logger=logger, default_timeout=self.settings.command_timeout
        )
        self.confirm = confirm or prompt_confirm
        self.host_service = HostService(self.settings.os_release_path, logger=logger)
        self.report_service = ReportService(
            self.WORKFLOW, logger=logger, report_file=self.settings.report_file
        )
        self.host: Optional[HostProfile] = None

    @property
    def report(self) -> Report:
        return self.report_service.report

    def _run_cmd(self, cmd: List[str], check: bool = True, capture_output: bool = False, **kwargs):
        return self.command_runner.run(cmd, check=check, capture_output=capture_output, **kwargs)

    def detect_host(self) -> HostProfile:
        self.host = self.host_service.detect(self.TARGETS)
        self.host_service.ensure_root()
        return self.host

    def _run_step(self, name: str, callback, *args, advisory: bool = False, **kwargs):
        self.report_service.step_started(name)
        logger.debug("Starting step: %s", name)

        try:
            outcome = callback(*args, **kwargs)
        except ProvisionerError as exc:
            if not advisory:
                self.report_service.step_finished(name, StepStatus.FAILED, str(exc))
                raise
            logger.warning("%s failed (continuing): %s", name, exc)
            console.print(f"[yellow]Warning:[/yellow] {name}: {exc}")
            self.report_service.step_finished(name, StepStatus.WARNING, str(exc), advisory=True)
            return None

        if not isinstance(outcome, Outcome):
            outcome = Outcome.ok()
        if outcome.status == StepStatus.DEGRADED:
            logger.warning("%s: %s", name, outcome.message)
        elif outcome.message:
            logger.info("%s: %s", name, outcome.message)
        self.report_service.step_finished(name, outcome.status, outcome.message, advisory=advisory)
        return outcome

    def require_confirmation(self, prompt: str, assume_yes: bool):
        if assume_yes:
            return
        if not self.confirm(prompt):
            raise AbortedByUser("Aborted by user.")

    def execute(self):
        raise NotImplementedError

    def print_summary(self):
        console.print(self.report_service.render())
        for key, value in self.report.observations:
            console.print(f"  - {key}: {value}")

    def run(self) -> int:
        exit_code = 1
        error: Optional[str] = None
        self.report_service.start_run()

        try:
            logger.info("Starting %s...", self.WORKFLOW)
            self.detect_host()
            self.execute()
            exit_code = 0
        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            error = "Operation cancelled by user."
            exit_code = 1
        except AbortedByUser as exc:
            console.print(f"[yellow]{exc}[/yellow]")
            logger.info(str(exc))
            error = str(exc)
            exit_code = exc.exit_code
        except ProvisionerError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            error = str(exc)
            exit_code = exc.exit_code
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            error = str(exc)
            exit_code = 1
        finally:
            self.report_service.finalize(error=error)

        if self.report.steps:
            self.print_summary()
        if exit_code == 0 and self.report.status == StepStatus.DEGRADED:
            console.print(
                "[yellow]Finished with warnings. Review the degraded steps above.[/yellow]"
            )
        return exit_code
