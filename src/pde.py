# Simulation clock, kept on the host and advanced once per generation.
class Cursor:
  def __init__(self, dt, t0=0.0):
    self.dt = dt

    self.t0 = t0
    self.t = t0
    self.n = 0

  def step(self):
    self.n += 1
    # from the step count, so that t == t0 + n*dt exactly
    self.t = self.t0 + self.n * self.dt

class Pde:
  def __init__(self, ensemble, field, params, cursor, stepper):
    self.ensemble = ensemble
    self.field = field
    self.params = params
    self.cur = cursor
    self.stepper = stepper

  def step(self):
    self.stepper.step(self.ensemble, self.cur, self.field, self.params)
