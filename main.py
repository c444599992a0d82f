import sys

import workflow

from fields import WavePacket
from npoint import NPointModel
from src import device
from src.errors import SimulationError
from src.timestepper import Blocked

# Run configuration.
N = 20000
iters = 4000   # Model iterations
steps = 20     # Iterations between snapshots
dt = 0.0005
limit = 3.0    # Plot boundary (disk radius)
threads = 256  # Points per block
debug = True   # Check the device after every operation

# Wave packet, w(k) = dispersion * k^2.
physics = dict(
  amplitude=0.1,
  wavelength=0.25,
  width=1.0,
  dispersion=0.02,
)

def main(argv=None):
  argv = sys.argv[1:] if argv is None else argv
  dir = argv[0] if argv else None

  try:
    dev = device.select()
    if debug:
      print(device.query(dev), file=sys.stderr)

    m = NPointModel(
      name='npoint',
      N=N,
      limit=limit,
      dt=dt,
      field=WavePacket(**physics),
      device=dev,
      stepper=Blocked(threads),
      debug=debug,
    )
    print(m, file=sys.stderr)

    workflow.workflow(
      dir=dir,
      model=m,
      iters=iters,
      steps=steps,
    )
  except SimulationError as e:
    print('error: {} failed ({})'.format(e.op, type(e).__name__), file=sys.stderr)
    print(e, file=sys.stderr)
    return 1
  return 0

if __name__ == '__main__':
  sys.exit(main())
