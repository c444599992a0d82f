import math
import torch

class Params:
  """Read-only bundle of scalar constants handed to a field on every step.

  Built once on the host; `to(device)` returns a copy whose values are
  0-dim tensors resident on `device`.
  """
  def __init__(self, **values):
    object.__setattr__(self, '_values', dict(values))

  def __getattr__(self, name):
    try:
      return self._values[name]
    except KeyError:
      raise AttributeError(name) from None

  def __setattr__(self, name, value):
    raise AttributeError('Params are immutable')

  def __iter__(self):
    return iter(self._values.items())

  def __repr__(self):
    return 'Params({})'.format(', '.join('{}={}'.format(k, float(v)) for k, v in self))

  def to(self, device):
    return Params(**{k: torch.as_tensor(v, dtype=torch.float64, device=device) for k, v in self})

class Constant:
  def __init__(self, c=0.0):
    self.c = c

  def params(self):
    return Params(c=self.c)

  def predict(self, x, y, t, p):
    return torch.zeros_like(x) + p.c

# psi = t, every point reads the same clock value.
class Clock:
  def params(self):
    return Params()

  def predict(self, x, y, t, p):
    return torch.full_like(x, float(t))

# Dispersive wave packet spreading radially from the origin.
class WavePacket:
  def __init__(self, amplitude, wavelength, width, dispersion, exact_origin=True):
    self.amplitude = amplitude
    self.wavelength = wavelength
    self.width = width
    # w(k) = dispersion * k^2
    self.dispersion = dispersion
    self.exact_origin = exact_origin

  def params(self):
    k  = 2 * math.pi / self.wavelength
    dk = 2 * math.pi / self.width
    return Params(
      A=self.amplitude,
      k=k,
      dk=dk,
      w=self.dispersion * k**2,
      vg=2 * self.dispersion * k,
    )

  def predict(self, x, y, t, p):
    """Where alpha == 0 the exact limit is 2*A*dk (sin(x)/x -> 1, cos(0) = 1), used unless exact_origin is off."""
    r = torch.sqrt(x**2 + y**2)
    alpha = r - p.vg * t

    psi = 2 * p.A * p.dk * torch.sin(p.dk * alpha) * torch.cos(p.k * alpha) / (p.dk * alpha)
    if self.exact_origin:
      # sin(x)/x -> 1 and cos(0) = 1
      psi = torch.where(alpha == 0, 2 * p.A * p.dk, psi)
    return psi
