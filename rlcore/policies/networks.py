"""Torch actor networks producing numpy-backed Categorical distributions.

Observations and recurrent states cross the network boundary as numpy
arrays, so they stack, unstack and copy like every other value in a
rollout.  Evaluation happens under ``torch.no_grad()``: these networks are
used to act, not to train.
"""

from __future__ import annotations

import numpy as np
import torch
import torch.nn as nn

from rlcore.distributions.categorical import Categorical


def _mlp(input_dim: int, hidden: int) -> nn.Sequential:
    return nn.Sequential(
        nn.Linear(input_dim, hidden),
        nn.Tanh(),
        nn.Linear(hidden, hidden),
        nn.Tanh(),
    )


def _as_tensor(value: np.ndarray) -> torch.Tensor:
    return torch.as_tensor(np.asarray(value, dtype=np.float32))


class CategoricalActorNetwork(nn.Module):
    """Feed-forward actor: MLP body followed by a logits head."""

    def __init__(self, obs_dim: int, num_actions: int, hidden: int = 64):
        super().__init__()
        self.body = _mlp(obs_dim, hidden)
        self.logits_head = nn.Linear(hidden, num_actions)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.logits_head(self.body(x))

    def initial_state(self) -> None:
        return None

    def evaluate(self, observation: np.ndarray, state: None) -> tuple[Categorical, None]:
        with torch.no_grad():
            logits = self.forward(_as_tensor(observation))
        return Categorical(logits=logits.numpy().astype(np.float64)), state


class RecurrentCategoricalActorNetwork(nn.Module):
    """Recurrent actor: MLP body, GRU cell memory, logits head.

    The hidden state has shape ``(hidden,)`` per instance, or
    ``(batch, hidden)`` when stacked.
    """

    def __init__(self, obs_dim: int, num_actions: int, hidden: int = 64):
        super().__init__()
        self.hidden = hidden
        self.body = _mlp(obs_dim, hidden)
        self.cell = nn.GRUCell(hidden, hidden)
        self.logits_head = nn.Linear(hidden, num_actions)

    def forward(self, x: torch.Tensor, h: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
        h_next = self.cell(self.body(x), h)
        return self.logits_head(h_next), h_next

    def initial_state(self) -> np.ndarray:
        return np.zeros(self.hidden, dtype=np.float32)

    def evaluate(
        self, observation: np.ndarray, state: np.ndarray,
    ) -> tuple[Categorical, np.ndarray]:
        with torch.no_grad():
            logits, h_next = self.forward(_as_tensor(observation), _as_tensor(state))
        return Categorical(logits=logits.numpy().astype(np.float64)), h_next.numpy().copy()
