import os

import h5py
import numpy as np
import torch

from src.errors import SnapshotError

EXT = '.dat'
FMT = '%.6e'

def filename(t):
  return '{:.6f}{}'.format(t, EXT)

def _numpy(points):
  if isinstance(points, torch.Tensor):
    return points.detach().cpu().numpy()
  return np.asarray(points)

# One file per snapshot: limit line (value from column 11), column header, then x y psi per point.
def write(dir, t, limit, points):
  path = os.path.join(dir, filename(t))
  try:
    np.savetxt(
      path,
      _numpy(points),
      fmt=FMT,
      delimiter=' ',
      header='limit = {:.6f}\nx y psi'.format(limit),
      comments='# ',
    )
  except OSError as e:
    raise SnapshotError('snapshot write', '{}: {}'.format(path, e)) from e
  return path

def read(path):
  limit = None
  with open(path) as f:
    for line in f:
      if line.startswith('# limit = '):
        limit = float(line[len('# limit = '):])
        break
  if limit is None:
    raise ValueError('{} has no limit header'.format(path))
  points = np.loadtxt(path, comments='#', ndmin=2)
  return limit, points

# All snapshots of a run in one file.
def dump(path, times, frames, limit):
  frames = np.stack([_numpy(f) for f in frames]) if len(frames) else np.zeros([0, 0, 3])
  try:
    with h5py.File(path, 'w') as hf:
      hf.attrs['limit'] = limit
      hf.create_dataset('time', data=np.asarray(times, dtype=np.float64))
      hf.create_dataset('x',   data=frames[:, :, 0])
      hf.create_dataset('y',   data=frames[:, :, 1])
      hf.create_dataset('psi', data=frames[:, :, 2])
  except OSError as e:
    raise SnapshotError('snapshot dump', '{}: {}'.format(path, e)) from e
  return path

def load(path):
  with h5py.File(path, 'r') as hf:
    times = hf['time'][:]
    frames = np.stack((hf['x'][:], hf['y'][:], hf['psi'][:]), axis=-1)
    limit = float(hf.attrs['limit'])
  return times, frames, limit
