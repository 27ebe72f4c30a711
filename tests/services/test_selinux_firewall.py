import pytest

from hostprovisioner.errors import CommandError
from hostprovisioner.services.firewall import FirewallService
from hostprovisioner.services.package_manager import PackageManagerService
from hostprovisioner.services.selinux import SELinuxService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


def which_of(*present):
    return lambda name: f"/usr/sbin/{name}" if name in present else None


def test_firewall_port_rules(fake_runner):
    firewall = FirewallService(fake_runner.run, logger=DummyLogger(), which=which_of("firewall-cmd"))

    assert firewall.is_available() is True
    firewall.add_port(3306)
    firewall.remove_port(3306)
    firewall.add_service("https")
    firewall.reload()

    assert fake_runner.lines == [
        "firewall-cmd --permanent --add-port=3306/tcp",
        "firewall-cmd --permanent --remove-port=3306/tcp",
        "firewall-cmd --permanent --add-service=https",
        "firewall-cmd --reload",
    ]


def test_firewall_unavailable_without_binary(fake_runner):
    assert FirewallService(fake_runner.run, DummyLogger(), which=which_of()).is_available() is False


@pytest.mark.parametrize(
    "mode, expected", [("Enforcing\n", True), ("Permissive\n", True), ("Disabled\n", False)]
)
def test_selinux_is_enabled(fake_runner, mode, expected):
    fake_runner.respond(["getenforce"], stdout=mode)
    selinux = SELinuxService(fake_runner.run, DummyLogger(), which=which_of("getenforce"))

    assert selinux.is_enabled() is expected


def test_selinux_absent_without_getenforce(fake_runner):
    selinux = SELinuxService(fake_runner.run, DummyLogger(), which=which_of())

    assert selinux.is_enabled() is False
    assert fake_runner.calls == []


def test_ensure_semanage_tries_packages_in_order(fake_runner):
    fake_runner.respond(["rpm", "-q"], returncode=1)
    fake_runner.respond(["dnf", "-y", "install", "policycoreutils-python-utils"], returncode=1)
    package_manager = PackageManagerService(fake_runner.run, DummyLogger())
    selinux = SELinuxService(fake_runner.run, DummyLogger(), which=which_of())

    package = selinux.ensure_semanage(
        ("policycoreutils-python-utils", "policycoreutils-python"), package_manager
    )

    assert package == "policycoreutils-python"
    assert fake_runner.lines[-2:] == [
        "dnf -y install policycoreutils-python-utils",
        "dnf -y install policycoreutils-python",
    ]


def test_ensure_semanage_raises_when_nothing_installs(fake_runner):
    fake_runner.respond(["rpm", "-q"], returncode=1)
    fake_runner.respond(["dnf"], returncode=1)
    package_manager = PackageManagerService(fake_runner.run, DummyLogger())
    selinux = SELinuxService(fake_runner.run, DummyLogger(), which=which_of())

    with pytest.raises(CommandError, match="Could not install semanage"):
        selinux.ensure_semanage(("policycoreutils",), package_manager)
