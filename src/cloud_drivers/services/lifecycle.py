"""Machine lifecycle state machine driven by refresh polling."""

import asyncio
import logging
from dataclasses import dataclass, field

from cloud_drivers.domain.errors import MachineInErrorState, MachineNotFound
from cloud_drivers.domain.machines import Machine, MachineStatus

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """Outcome of one refresh step."""

    status: MachineStatus
    delayed: bool = False


def next_status(machine: Machine, simulate_boot_delay: bool) -> Transition:
    """Return the transition a refresh applies to a machine.

    Raises MachineInErrorState for machines in the error state; their status
    is left untouched.
    """
    if machine.status == MachineStatus.ERROR:
        raise MachineInErrorState(machine.id)
    if machine.status == MachineStatus.STOPPING:
        return Transition(MachineStatus.STOPPED)
    if simulate_boot_delay:
        return Transition(MachineStatus.RUNNING, delayed=True)
    return Transition(MachineStatus.RUNNING)


@dataclass
class MachineLifecycle:
    """Applies transitions and owns the pending delayed boots."""

    boot_delay_seconds: float = 0.5
    _timers: dict[str, asyncio.Task[None]] = field(default_factory=dict)

    async def advance(self, machine: Machine, simulate_boot_delay: bool) -> Machine:
        """Apply one transition, waiting out the boot delay when simulated."""
        transition = next_status(machine, simulate_boot_delay)
        if transition.delayed:
            await self._wait_for_boot(machine.id)
        if machine.status != transition.status:
            _logger.info(
                "Machine %s: %s -> %s", machine.id, machine.status, transition.status
            )
        return machine.with_status(transition.status)

    def cancel(self, machine_id: str) -> bool:
        """Cancel a pending delayed boot; return whether one was pending."""
        timer = self._timers.pop(machine_id, None)
        if timer is None or timer.done():
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> None:
        """Cancel every pending delayed boot."""
        for machine_id in list(self._timers):
            self.cancel(machine_id)

    def pending(self, machine_id: str) -> bool:
        """Return whether a delayed boot is pending for a machine."""
        timer = self._timers.get(machine_id)
        return timer is not None and not timer.done()

    async def _wait_for_boot(self, machine_id: str) -> None:
        timer = self._timers.get(machine_id)
        if timer is None or timer.done():
            timer = asyncio.create_task(asyncio.sleep(self.boot_delay_seconds))
            self._timers[machine_id] = timer
        try:
            await asyncio.shield(timer)
        except asyncio.CancelledError:
            if not timer.cancelled():
                raise
            raise MachineNotFound(machine_id) from None
        finally:
            if self._timers.get(machine_id) is timer and timer.done():
                self._timers.pop(machine_id, None)
