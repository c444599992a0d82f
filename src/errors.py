class SimulationError(Exception):
  def __init__(self, op, detail=''):
    self.op = op
    self.detail = detail
    msg = op if not detail else '{}: {}'.format(op, detail)
    super().__init__(msg)

# No compatible accelerator.
class NoDeviceError(SimulationError):
  pass

class AllocationError(SimulationError):
  pass

# Raised after a dispatch or a copy, watchdog aborts included.
class DeviceExecutionError(SimulationError):
  pass

# Snapshot file could not be created or written.
class SnapshotError(SimulationError, OSError):
  pass
