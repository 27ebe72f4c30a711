"""Domain errors for hostprovisioner."""


class ProvisionerError(RuntimeError):
    """Raised when provisioning cannot continue safely."""

    exit_code = 1


class UnsupportedHostError(ProvisionerError):
    """Raised when the host does not match any supported target."""


class AbortedByUser(ProvisionerError):
    """Raised when the operator declines a confirmation prompt."""


class CommandError(ProvisionerError):
    """Raised when an external command fails definitively."""

    def __init__(self, message: str, returncode: int = 1):
        super().__init__(message)
        self.returncode = returncode

    @property
    def exit_code(self) -> int:
        return self.returncode or 1
