"""Convolutional Q-network over stacked 84x84 frames.

Features:
    - Nature-DQN convolutional body (3 conv layers + 512 unit hidden layer)
    - Optional Dueling architecture (value + advantage streams)
    - Accepts uint8 frames and normalises them to [0, 1] internally
"""
from __future__ import annotations

from typing import Tuple, List
import torch
import torch.nn as nn


class DQN(nn.Module):
    def __init__(
        self,
        input_shape: Tuple[int, int, int],
        num_actions: int,
        hidden: int = 512,
        dueling: bool = False,
    ):
        super().__init__()
        if len(input_shape) != 3:
            raise ValueError("Expected (frames, height, width) input shape")
        if num_actions < 1:
            raise ValueError("num_actions must be >= 1")
        self.dueling = dueling
        self.num_actions = num_actions
        channels, height, width = input_shape
        convs: List[nn.Module] = [
            nn.Conv2d(channels, 32, kernel_size=8, stride=4),
            nn.ReLU(),
            nn.Conv2d(32, 64, kernel_size=4, stride=2),
            nn.ReLU(),
            nn.Conv2d(64, 64, kernel_size=3, stride=1),
            nn.ReLU(),
            nn.Flatten(),
        ]
        self.conv = nn.Sequential(*convs)
        with torch.no_grad():
            conv_out = int(self.conv(torch.zeros(1, channels, height, width)).shape[1])
        self.body = nn.Sequential(nn.Linear(conv_out, hidden), nn.ReLU())

        if dueling:
            self.adv_head = nn.Linear(hidden, num_actions)
            self.val_head = nn.Linear(hidden, 1)
        else:
            self.head = nn.Linear(hidden, num_actions)
        for m in self.modules():
            if isinstance(m, (nn.Linear, nn.Conv2d)):
                nn.init.xavier_uniform_(m.weight)
                nn.init.zeros_(m.bias)

    def forward(self, x: torch.Tensor) -> torch.Tensor:  # type: ignore[override]
        x = x.float() / 255.0
        feats = self.body(self.conv(x))
        if self.dueling:
            adv = self.adv_head(feats)
            val = self.val_head(feats)
            # Broadcast-add value then subtract mean advantage for stability
            adv_mean = adv.mean(dim=-1, keepdim=True)
            return val + (adv - adv_mean)
        return self.head(feats)
