"""Run report: step outcomes, final observations and the optional JSON file."""

import json
import os
import tempfile
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from rich.table import Table

from hostprovisioner.models import Report, StepResult, StepStatus

STATUS_STYLES = {
    StepStatus.SUCCESS: "green",
    StepStatus.SKIPPED: "dim",
    StepStatus.DEGRADED: "yellow",
    StepStatus.WARNING: "yellow",
    StepStatus.FAILED: "bold red",
}


class ReportService:
    """Accumulates step results into a `Report` and renders it."""

    def __init__(self, workflow: str, logger, report_file: Optional[str] = None):
        self.logger = logger
        self.report_file = report_file
        self.report = Report(workflow=workflow)
        self.started_at: Optional[str] = None
        self.finished_at: Optional[str] = None
        self._step_started: Dict[str, datetime] = {}

    def start_run(self):
        self.started_at = self._now()

    def step_started(self, name: str):
        self._step_started[name] = datetime.now(timezone.utc)

    def step_finished(self, name: str, status: str, message: str = "", advisory: bool = False):
        started = self._step_started.pop(name, None)
        duration = None
        if started is not None:
            duration = (datetime.now(timezone.utc) - started).total_seconds()
        self.report.steps.append(
            StepResult(
                name=name,
                status=status,
                message=message,
                advisory=advisory,
                duration_seconds=duration,
            )
        )

    def observe(self, key: str, value: str):
        self.report.observations.append((key, value))

    def finalize(self, error: Optional[str] = None) -> Report:
        self.report.error = error
        self.finished_at = self._now()
        if self.report_file:
            self.write()
        return self.report

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workflow": self.report.workflow,
            "status": self.report.status,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "steps": [asdict(step) for step in self.report.steps],
            "observations": [
                {"key": key, "value": value} for key, value in self.report.observations
            ],
            "error": self.report.error,
        }

    def write(self):
        os.makedirs(os.path.dirname(self.report_file) or ".", exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            prefix="provision-report-", suffix=".json", dir=os.path.dirname(self.report_file) or "."
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.to_dict(), file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            try:
                os.remove(temp_path)
            except OSError:
                pass

    def render(self) -> Table:
        table = Table(title=f"{self.report.workflow} summary", show_lines=False)
        table.add_column("Step")
        table.add_column("Status")
        table.add_column("Details", overflow="fold")
        for step in self.report.steps:
            style = STATUS_STYLES.get(step.status, "")
            table.add_row(step.name, f"[{style}]{step.status}[/{style}]", step.message)
        return table

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
