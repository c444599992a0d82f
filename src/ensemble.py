import math
import torch

from src.device import guard
from src.errors import AllocationError

# Columns of a sample point record.
X, Y, PSI = 0, 1, 2

# Polar sweep over a disk of radius `radius`: equal radial and angular counts
# whose product is at least n, extra samples dropped.
def disk(n, radius):
  m = max(1, math.ceil(math.sqrt(n)))
  dr = radius / m
  dth = 2 * math.pi / m

  r  = torch.arange(m, dtype=torch.float64) * dr
  th = torch.arange(m, dtype=torch.float64) * dth
  rr, tt = torch.meshgrid(r, th, indexing='ij')

  pos = torch.stack((rr * torch.cos(tt), rr * torch.sin(tt)), dim=-1).reshape(-1, 2)
  return pos[:n].clone()

class Ensemble:
  def __init__(self, N, device, limit, positions=None):
    if N < 1:
      raise ValueError('ensemble needs at least one point, got {}'.format(N))

    self.N = N
    self.device = torch.device(device)

    # Host/device mirrors are only consistent right after a copy: `generation`
    # counts device mutations, `synced` the generation the host last saw.
    self.generation = 0
    self.synced = 0
    self.uploaded = False

    self.h = None
    self.d = None
    try:
      self.h = torch.empty([N, 3], dtype=torch.float64)
      self.d = torch.empty([N, 3], dtype=torch.float64, device=self.device)
    except RuntimeError as e:
      self.release()
      raise AllocationError('ensemble allocation', '{} points: {}'.format(N, e)) from e

    if positions is None:
      positions = disk(N, limit)
    positions = torch.as_tensor(positions, dtype=torch.float64)
    if positions.shape != (N, 2):
      self.release()
      raise ValueError('expected positions of shape ({}, 2), got {}'.format(N, tuple(positions.shape)))

    self.h[:, X:PSI] = positions
    # Not computed until the first kernel pass.
    self.h[:, PSI] = float('nan')

  def __len__(self):
    return self.N

  # Device views
  @property
  def x(self):
    return self.d[:, X]

  @property
  def y(self):
    return self.d[:, Y]

  @property
  def psi(self):
    return self.d[:, PSI]

  @property
  def host(self):
    return self.h

  @property
  def stale(self):
    return self.synced != self.generation

  @property
  def released(self):
    return self.h is None and self.d is None

  def touch(self):
    self.generation += 1

  def to_device(self):
    # Positions are write-once: the host copy is authoritative only before the first step.
    if self.generation > 0:
      raise RuntimeError('ensemble already mutated on device, refusing host->device copy')
    with guard('host->device copy'):
      self.d.copy_(self.h)
    self.uploaded = True

  def to_host(self):
    # The device copy holds garbage until the first upload.
    if not self.uploaded:
      raise RuntimeError('ensemble not on device yet, refusing device->host copy')
    with guard('device->host copy'):
      self.h.copy_(self.d)
    self.synced = self.generation
    return self.h

  # Host copy guaranteed fresh, for readers outside the loop.
  def snapshot(self):
    if self.stale:
      raise RuntimeError('host copy is stale (generation {}, synced {})'.format(self.generation, self.synced))
    return self.h

  def positions(self):
    return self.h[:, X:PSI]

  def release(self):
    self.h = None
    self.d = None
    if self.device.type == 'cuda':
      torch.cuda.empty_cache()
