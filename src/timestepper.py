import torch

# A generation: advance the clock once on the host, then evaluate the field
# over every point with that single time value.
class Direct:
  def step(self, ensemble, cur, field, params):
    cur.step()
    t = cur.t

    ensemble.psi.copy_(field.predict(ensemble.x, ensemble.y, t, params))
    ensemble.touch()

# Same pass split in blocks of `threads` points, one launch per block.
class Blocked:
  def __init__(self, threads=256):
    if threads < 1:
      raise ValueError('threads must be positive, got {}'.format(threads))
    self.threads = threads

  def blocks(self, n):
    return (n + self.threads - 1) // self.threads

  def step(self, ensemble, cur, field, params):
    cur.step()
    t = cur.t

    x, y, psi = ensemble.x, ensemble.y, ensemble.psi
    for b in range(self.blocks(len(ensemble))):
      i0 = b * self.threads
      i1 = min(i0 + self.threads, len(ensemble))
      psi[i0:i1] = field.predict(x[i0:i1], y[i0:i1], t, params)
    ensemble.touch()
