import pytest
import torch

import npoint
from fields import Clock, WavePacket
from npoint import NPointModel
from src.errors import DeviceExecutionError
from src.pde import Cursor
from src.timestepper import Direct, Blocked

def wave():
  return WavePacket(amplitude=0.1, wavelength=0.25, width=1.0, dispersion=0.02)

def test_cursor_exact_multiples():
  cur = Cursor(0.0005)
  for s in range(1, 2001):
    cur.step()
    assert cur.n == s
    assert cur.t == s * 0.0005

def test_clock_scenario(cpu, square):
  m = NPointModel('clock', 4, 1.0, 0.0005, Clock(), cpu, positions=square)
  m.start()

  m.step()
  h = m.sync()
  assert h[:, 2].tolist() == pytest.approx([0.0005] * 4)
  assert torch.equal(h[:, :2], square)

  m.step()
  h = m.sync()
  assert h[:, 2].tolist() == pytest.approx([0.0010] * 4)
  assert m.cur.t == 2 * 0.0005

@pytest.mark.parametrize('N', [1, 37, 1000])
@pytest.mark.parametrize('stepper', [Direct(), Blocked(7)])
def test_clock_independent_of_parallelism(cpu, N, stepper):
  m = NPointModel('clock', N, 1.0, 0.001, Clock(), cpu, stepper=stepper)
  m.start()
  for _ in range(5):
    m.step()
  assert m.cur.t == 5 * 0.001
  # every point saw the same time
  assert (m.sync()[:, 2] == m.cur.t).all()

def test_determinism(cpu):
  a = NPointModel('a', 500, 3.0, 0.0005, wave(), cpu)
  b = NPointModel('b', 500, 3.0, 0.0005, wave(), cpu)
  for m in (a, b):
    m.start()
    for _ in range(10):
      m.step()
  assert torch.equal(a.sync(), b.sync())

def test_blocked_matches_direct(cpu):
  a = NPointModel('a', 1000, 3.0, 0.0005, wave(), cpu, stepper=Direct())
  b = NPointModel('b', 1000, 3.0, 0.0005, wave(), cpu, stepper=Blocked(64))
  for m in (a, b):
    m.start()
    for _ in range(3):
      m.step()
  assert torch.allclose(a.sync(), b.sync(), rtol=1e-12, atol=1e-15)

def test_blocks():
  assert Blocked(256).blocks(1) == 1
  assert Blocked(256).blocks(256) == 1
  assert Blocked(256).blocks(257) == 2
  with pytest.raises(ValueError):
    Blocked(0)

def test_origin_point_is_finite(cpu):
  # the first disk sample sits on the origin, alpha == 0 only at t == 0
  m = NPointModel('origin', 16, 1.0, 0.0005, wave(), cpu)
  m.start()
  m.step()
  assert not torch.isnan(m.sync()[:, 2]).any()

def test_params_pushed_on_start(cpu):
  m = NPointModel('p', 4, 1.0, 0.0005, wave(), cpu)
  assert isinstance(m.pde.params.k, float)
  m.start()
  assert isinstance(m.pde.params.k, torch.Tensor)
  assert m.pde.params.k.device == cpu

def test_state_machine(cpu):
  m = NPointModel('s', 4, 1.0, 0.0005, Clock(), cpu)
  assert m.state == npoint.UNINITIALIZED
  with pytest.raises(RuntimeError):
    m.step()

  m.start()
  assert m.state == npoint.RUNNING
  with pytest.raises(RuntimeError):
    m.start()

  m.step()
  m.finish()
  assert m.state == npoint.COMPLETED
  assert m.ensemble.released
  with pytest.raises(RuntimeError):
    m.step()

class Broken:
  def params(self):
    return Clock().params()

  def predict(self, x, y, t, p):
    raise RuntimeError('the launch timed out and was terminated')

def test_device_error_fails_model(cpu):
  m = NPointModel('broken', 4, 1.0, 0.0005, Broken(), cpu)
  m.start()
  with pytest.raises(DeviceExecutionError) as e:
    m.step()
  assert e.value.op == 'field kernel'
  assert m.state == npoint.FAILED
  assert m.ensemble.released

def test_run_visits_every_step(cpu):
  m = NPointModel('r', 4, 1.0, 0.5, Clock(), cpu)
  m.start()
  seen = []
  m.run(3, lambda m, cur, it: seen.append((it, cur.t)), invisible=True)
  assert seen == [(0, 0.5), (1, 1.0), (2, 1.5)]

def test_str(cpu):
  s = str(NPointModel('desc', 4, 1.0, 0.0005, wave(), cpu))
  assert 'desc' in s
  assert 'WavePacket' in s
