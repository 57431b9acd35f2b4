# src/fpg/detect/trials.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from fpg.detect.base import CommunityDetector


def run_trials(
    detector: CommunityDetector,
    edges: pd.DataFrame,
    types: np.ndarray,
    grid: Iterable[Tuple[int, int]],
    *,
    deg_corr: bool = True,
    max_workers: Optional[int] = None,
) -> Dict[Tuple[int, int], np.ndarray]:
    """
    Runs one detection per (ka, kb) pair. Trials share read-only inputs and
    nothing else; the first failing trial's exception propagates.
    """
    pairs = list(dict.fromkeys((int(ka), int(kb)) for ka, kb in grid))
    if not pairs:
        return {}

    workers = max_workers or min(len(pairs), 4)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pair: pool.submit(detector.detect, edges, types, pair[0], pair[1], deg_corr)
            for pair in pairs
        }
        return {pair: np.asarray(fut.result()) for pair, fut in futures.items()}
