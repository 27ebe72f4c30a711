import json
from dataclasses import replace

import pytest

from hostprovisioner.core import ProvisioningRunner
from hostprovisioner.errors import CommandError, ProvisionerError
from hostprovisioner.models import AMAZON_LINUX_2023, Outcome, StepStatus
from hostprovisioner.settings import Settings


class ScriptedRunner(ProvisioningRunner):
    WORKFLOW = "scripted"
    TARGETS = (AMAZON_LINUX_2023,)

    def __init__(self, steps, **kwargs):
        super().__init__(**kwargs)
        self.steps = steps
        self.executed = []

    def execute(self):
        for name, callback, advisory in self.steps:
            self.executed.append(name)
            self._run_step(name, callback, advisory=advisory)


def fail(returncode=1):
    def _callback():
        raise CommandError("Command failed", returncode=returncode)

    return _callback


def build(host_settings, fake_runner, steps, **kwargs):
    return ScriptedRunner(steps, settings=host_settings, command_runner=fake_runner, **kwargs)


def test_advisory_failure_is_recorded_as_warning_and_run_continues(host_settings, fake_runner):
    runner = build(
        host_settings,
        fake_runner,
        [
            ("cleanup", fail(), True),
            ("primary", lambda: Outcome.ok("done"), False),
        ],
    )

    assert runner.run() == 0

    assert runner.executed == ["cleanup", "primary"]
    cleanup = runner.report.result_for("cleanup")
    assert cleanup.status == StepStatus.WARNING
    assert cleanup.advisory is True
    assert runner.report.result_for("primary").message == "done"
    assert runner.report.status == StepStatus.DEGRADED


def test_fatal_failure_stops_run_with_command_exit_code(host_settings, fake_runner):
    runner = build(
        host_settings,
        fake_runner,
        [
            ("primary", fail(returncode=5), False),
            ("never", lambda: None, False),
        ],
    )

    assert runner.run() == 5

    assert runner.executed == ["primary"]
    assert runner.report.result_for("primary").status == StepStatus.FAILED
    assert runner.report.status == StepStatus.FAILED


def test_step_returning_none_is_success(host_settings, fake_runner):
    runner = build(host_settings, fake_runner, [("quiet", lambda: None, False)])

    assert runner.run() == 0
    assert runner.report.result_for("quiet").status == StepStatus.SUCCESS
    assert runner.report.result_for("quiet").duration_seconds >= 0


def test_degraded_outcome_keeps_exit_code_zero(host_settings, fake_runner):
    runner = build(
        host_settings, fake_runner, [("poll", lambda: Outcome.degraded("timed out"), False)]
    )

    assert runner.run() == 0
    assert runner.report.status == StepStatus.DEGRADED


def test_unexpected_exception_exits_one(host_settings, fake_runner):
    def explode():
        raise ValueError("boom")

    runner = build(host_settings, fake_runner, [("explode", explode, False)])

    assert runner.run() == 1
    assert runner.report.error == "boom"


def test_keyboard_interrupt_exits_one(host_settings, fake_runner):
    def interrupt():
        raise KeyboardInterrupt()

    runner = build(host_settings, fake_runner, [("wait", interrupt, False)])

    assert runner.run() == 1
    assert runner.report.error == "Operation cancelled by user."


def test_missing_os_release_is_a_precondition_failure(tmp_path, fake_runner):
    settings = Settings(os_release_path=str(tmp_path / "missing"))
    runner = ScriptedRunner(
        [("never", lambda: None, False)], settings=settings, command_runner=fake_runner
    )

    assert runner.run() == 1

    assert runner.executed == []
    assert "is missing or unreadable" in runner.report.error


def test_require_confirmation_respects_assume_yes(host_settings, fake_runner):
    runner = build(host_settings, fake_runner, [], confirm=lambda prompt: False)

    runner.require_confirmation("Continue?", assume_yes=True)

    with pytest.raises(ProvisionerError, match="Aborted by user."):
        runner.require_confirmation("Continue?", assume_yes=False)


def test_report_file_is_written(tmp_path, host_settings, fake_runner):
    report_file = tmp_path / "reports" / "run.json"
    settings = replace(host_settings, report_file=str(report_file))
    runner = ScriptedRunner(
        [("primary", lambda: Outcome.skipped("already done"), False)],
        settings=settings,
        command_runner=fake_runner,
    )

    assert runner.run() == 0

    payload = json.loads(report_file.read_text(encoding="utf-8"))
    assert payload["workflow"] == "scripted"
    assert payload["status"] == StepStatus.SUCCESS
    assert payload["steps"][0]["name"] == "primary"
    assert payload["steps"][0]["status"] == StepStatus.SKIPPED
    assert payload["error"] is None
