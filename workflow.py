import os
import sys
import time
import datetime

import tqdm
import torch

import matplotlib.pyplot as plt

import snapshot
from src.errors import SnapshotError

plt.rcParams.update({'mathtext.fontset':'cm'})

def timestamp():
  return datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')

def workflow(
  dir,
  model,
  iters,
  steps,
  diags=(),
  dump=False,
  invisible=False,
  out=None,
  keep=False,
):
  """Drive `model` for `iters` generations, syncing every `steps` of them.

  Every synced generation is written to `dir` (when given) and reported as a
  progress line `step wall t` on `out`. Returns the simulation times and the
  host frames of the synced generations; frames are only kept when `keep` is
  set or a dump or a diag needs them.
  """
  if steps < 1:
    raise ValueError('snapshot cadence must be positive, got {}'.format(steps))
  out = out if out is not None else sys.stdout
  keep = keep or bool(diags) or bool(dump and dir)

  if dir and not os.path.exists(dir):
    try:
      os.makedirs(dir)
    except OSError as e:
      raise SnapshotError('output directory', '{}: {}'.format(dir, e)) from e

  def emit(line):
    tqdm.tqdm.write(line, file=out)

  times = []
  frames = []

  model.start()
  emit('# start {}'.format(timestamp()))
  emit('# points {}'.format(model.N))
  emit('# steps {}'.format(iters))
  emit('# dt {:.6e}'.format(model.cur.dt))
  emit('# step wall(s) t')

  wall0 = time.perf_counter()

  def visitor(m, cur, it):
    if it % steps == 0:
      points = m.sync()
      if dir:
        try:
          snapshot.write(dir, cur.t, m.limit, points)
        except SnapshotError:
          m.fail()
          raise
      times.append(cur.t)
      if keep:
        frames.append(points.clone())
      emit('{:.6e} {:.6e} {:.6e}'.format(it, time.perf_counter() - wall0, cur.t))
    return None

  with torch.no_grad():
    model.run(iters, visitor, invisible=invisible)

  model.finish()
  emit('# done {}'.format(timestamp()))

  if dump and dir:
    snapshot.dump(os.path.join(dir, model.name + '_dump.h5'), times, frames, model.limit)

  for diag in diags:
    diag(dir, model.name, times, frames, model)
  return times, frames

def diag_points(dir, name, times, frames, model, show=False):
  if not frames:
    return

  points = frames[-1].numpy()
  lim = model.limit

  m_fig, m_ax = plt.subplots(figsize=(6, 5), constrained_layout=True)
  c = m_ax.scatter(points[:, 0], points[:, 1], c=points[:, 2], s=4, cmap='bwr')
  m_fig.colorbar(c, ax=m_ax, label=r'$\psi$')
  m_ax.set_xlim(-lim, lim)
  m_ax.set_ylim(-lim, lim)
  m_ax.set_aspect('equal')
  m_ax.set_title(r'$t = {:.6f}$'.format(times[-1]))

  if dir:
    m_fig.savefig(os.path.join(dir, name + '_points.png'), dpi=150)
  if show:
    plt.show()
  plt.close(m_fig)
