import matplotlib
matplotlib.use('Agg')

import pytest
import torch

@pytest.fixture
def cpu():
  return torch.device('cpu')

# Four fixed points used by the small scenarios.
@pytest.fixture
def square():
  return torch.tensor([[1.0, 0.0], [0.0, 1.0], [-1.0, 0.0], [0.0, -1.0]], dtype=torch.float64)
