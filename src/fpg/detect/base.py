# src/fpg/detect/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Tuple

import numpy as np
import pandas as pd


class CommunityDetector(Protocol):
    """Fits a biSBM with ka vendor blocks and kb product blocks."""

    def detect(
        self,
        edges: pd.DataFrame,
        types: np.ndarray,
        ka: int,
        kb: int,
        deg_corr: bool = True,
    ) -> np.ndarray:
        """Returns one community id per NodeId, NodeId order."""
        ...


class CommunityCountSelector(Protocol):
    """Chooses (ka, kb), e.g. by an MDL search."""

    def select(self, edges: pd.DataFrame, types: np.ndarray) -> Tuple[int, int]:
        ...


class DetectorError(RuntimeError):
    pass


@dataclass(frozen=True)
class FixedCommunityCounts:
    ka: int
    kb: int

    def __post_init__(self) -> None:
        if self.ka < 1 or self.kb < 1:
            raise ValueError("ka and kb must be >= 1")

    def select(self, edges: pd.DataFrame, types: np.ndarray) -> Tuple[int, int]:
        return self.ka, self.kb
