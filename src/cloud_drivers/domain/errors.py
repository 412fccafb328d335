"""Typed failures raised by machine drivers."""


class DriverError(Exception):
    """Base class for driver failures."""


class BackendUnavailable(DriverError):
    """The backend could not be set up."""


class ProvisioningFailed(DriverError):
    """The backend rejected a creation request."""


class MachineNotFound(DriverError):
    """The backend does not recognize the machine."""

    def __init__(self, machine_id: str) -> None:
        super().__init__(f"Machine not found: {machine_id}")
        self.machine_id = machine_id


class MachineInErrorState(DriverError):
    """The machine is in the terminal error state."""

    def __init__(self, machine_id: str) -> None:
        super().__init__(f"Machine is in error state: {machine_id}")
        self.machine_id = machine_id


class Unsupported(DriverError):
    """The operation is not implemented by this backend."""

    def __init__(self, driver: str, operation: str) -> None:
        super().__init__(f"Driver '{driver}' does not support {operation}")
        self.driver = driver
        self.operation = operation
