import tqdm
import torch

from src.device import guard, check
from src.ensemble import Ensemble
from src.errors import SimulationError
from src.pde import Cursor, Pde
from src.timestepper import Direct

UNINITIALIZED = 'uninitialized'
RUNNING = 'running'
COMPLETED = 'completed'
FAILED = 'failed'

class NPointModel:
  def __init__(self, name, N, limit, dt, field, device, stepper=None, debug=True, positions=None, t0=0.0):
    self.name = name
    self.device = torch.device(device)
    # synchronise and check after every device operation
    self.debug = debug
    self.limit = limit
    self.state = UNINITIALIZED

    self.field = field
    self.ensemble = Ensemble(N, self.device, limit, positions=positions)
    self.stepper = stepper if stepper is not None else Direct()

    # Host-side until start() pushes it.
    self.params = field.params()
    self.pde = Pde(self.ensemble, field, self.params, Cursor(dt, t0), self.stepper)

  def __str__(self):
    return """NPoint model {name}
       Points: {n} on a disk of radius {limit}
       Field: {field}
       Params: {params}
       dt: {dt}
       Device: {device} ({mode})
       """.format(
      name=self.name,
      n=len(self.ensemble),
      limit=self.limit,
      field=type(self.field).__name__,
      params=self.params,
      dt=self.pde.cur.dt,
      device=self.device,
      mode='debug' if self.debug else 'production')

  @property
  def N(self):
    return self.ensemble.N

  @property
  def cur(self):
    return self.pde.cur

  def expect(self, state):
    if self.state != state:
      raise RuntimeError('model {!r} is {}, expected {}'.format(self.name, self.state, state))

  def start(self):
    self.expect(UNINITIALIZED)
    try:
      with guard('parameter push'):
        self.pde.params = self.params.to(self.device)
      check(self.device, 'parameter push', self.debug)

      self.ensemble.to_device()
      check(self.device, 'host->device copy', self.debug)
    except SimulationError:
      self.fail()
      raise
    self.state = RUNNING

  def step(self):
    self.expect(RUNNING)
    try:
      with guard('field kernel'):
        self.pde.step()
      check(self.device, 'field kernel', self.debug)
    except SimulationError:
      self.fail()
      raise

  # Device -> host copy, returns the fresh host ensemble [N, 3].
  def sync(self):
    self.expect(RUNNING)
    try:
      self.ensemble.to_host()
    except SimulationError:
      self.fail()
      raise
    return self.ensemble.snapshot()

  def finish(self):
    self.expect(RUNNING)
    self.ensemble.release()
    self.state = COMPLETED

  def fail(self):
    if self.state in (COMPLETED, FAILED):
      return
    self.ensemble.release()
    self.state = FAILED

  def run(self, iters, visit, invisible=False):
    for it in tqdm.tqdm(range(iters), disable=invisible):
      self.step()
      visit(self, self.pde.cur, it)
