import sys
import shutil
import subprocess
import contextlib

import torch

from src.errors import NoDeviceError, AllocationError, DeviceExecutionError

class Candidate:
  def __init__(self, index, name, score):
    self.index = index
    self.name = name
    self.score = score

  def __repr__(self):
    return 'Candidate(index={}, name={!r}, score={})'.format(self.index, self.name, self.score)

# Compute capability major.minor encoded as a sortable integer (sm_86 -> 86).
def capability_score(major, minor):
  return major * 10 + minor

def candidates():
  found = []
  if not torch.cuda.is_available():
    return found
  for i in range(torch.cuda.device_count()):
    major, minor = torch.cuda.get_device_capability(i)
    found.append(Candidate(i, torch.cuda.get_device_name(i), capability_score(major, minor)))
  return found

def best(found):
  if not found:
    raise NoDeviceError('device selection', 'no CUDA device found')
  choice = found[0]
  for c in found[1:]:
    # strictly greater, so ties keep the first one
    if c.score > choice.score:
      choice = c
  return choice

def watchdog(index):
  """Whether the device drives a display, i.e. runs under the kernel execution watchdog.

  Only a diagnostic: returns False when nvidia-smi is missing or the query fails.
  """
  if shutil.which('nvidia-smi') is None:
    return False
  try:
    out = subprocess.check_output(
      ['nvidia-smi', '--query-gpu=display_active', '--format=csv,noheader', '-i', str(index)],
      stderr=subprocess.STDOUT,
      timeout=10,
    )
  except (subprocess.SubprocessError, OSError):
    return False
  return out.decode(errors='replace').strip().lower() == 'enabled'

def select(verbose=True):
  choice = best(candidates())
  torch.cuda.set_device(choice.index)

  if verbose:
    print('device = {} (index {}, capability {})'.format(choice.name, choice.index, choice.score), file=sys.stderr)
    if watchdog(choice.index):
      print('warning: {} has a display attached, long kernels may be killed by the watchdog'.format(choice.name), file=sys.stderr)
  return torch.device('cuda', choice.index)

def query(device):
  if device.type != 'cuda':
    return 'device = {}'.format(device)
  p = torch.cuda.get_device_properties(device)
  return """Device {index}: {name}
       Capability: {major}.{minor}
       Multiprocessors: {sm}
       Memory: {mem:.1f} MiB
       """.format(
    index=device.index,
    name=p.name,
    major=p.major,
    minor=p.minor,
    sm=p.multi_processor_count,
    mem=p.total_memory / 2**20)

# Debug builds synchronise after every operation so that an error is reported
# by the operation that caused it; otherwise it surfaces at the next blocking copy.
def check(device, op, debug=True):
  if not debug or device.type != 'cuda':
    return
  with guard(op):
    torch.cuda.synchronize(device)

@contextlib.contextmanager
def guard(op):
  try:
    yield
  except torch.cuda.OutOfMemoryError as e:
    raise AllocationError(op, str(e)) from e
  except RuntimeError as e:
    raise DeviceExecutionError(op, str(e)) from e
