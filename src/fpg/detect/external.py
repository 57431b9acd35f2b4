# src/fpg/detect/external.py
"""
Adapters for command-line biSBM tooling.

The command is a template; placeholders are filled per call:
  {edgelist} {types} {output}   paths inside a per-call work dir
  {ka} {kb} {deg_corr}          model parameters (deg_corr as true/false)

Example:
  ("bisbm-fit", "--edgelist", "{edgelist}", "--types", "{types}",
   "--ka", "{ka}", "--kb", "{kb}", "--deg-corr", "{deg_corr}", "--out", "{output}")
"""
from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from fpg.detect.base import DetectorError
from fpg.graph.formats import read_assignment, write_edgelist, write_types


def _log(msg: str) -> None:
    print(f"[{datetime.now().strftime('%H:%M:%S')}] {msg}", flush=True)


@dataclass(frozen=True)
class ExternalCommandConfig:
    command: Tuple[str, ...]
    cwd: Optional[Path] = None
    timeout_s: Optional[float] = None
    env: Mapping[str, str] = field(default_factory=dict)

    # Base dir for per-call work dirs; None uses the OS temp dir.
    work_dir: Optional[Path] = None
    keep_work_dir: bool = False


def _make_call_dir(base: Optional[Path], prefix: str) -> Path:
    if base is not None:
        base.mkdir(parents=True, exist_ok=True)
    return Path(
        tempfile.mkdtemp(
            prefix=f"{prefix}_{os.getpid()}_{datetime.now().strftime('%Y%m%d_%H%M%S')}_",
            dir=base.as_posix() if base is not None else None,
        )
    )


def _tail(text: str, n: int = 20) -> str:
    return "\n".join((text or "").strip().splitlines()[-n:])


def _run(cfg: ExternalCommandConfig, fields: Dict[str, str], label: str) -> None:
    if not cfg.command:
        raise DetectorError(f"{label}: empty command template")
    try:
        argv = [part.format(**fields) for part in cfg.command]
    except (KeyError, IndexError) as e:
        raise DetectorError(f"{label}: unknown placeholder in command template: {e}") from e

    _log(f"{label}: running {argv[0]}")
    try:
        result = subprocess.run(
            argv,
            cwd=str(cfg.cwd) if cfg.cwd is not None else None,
            capture_output=True,
            text=True,
            timeout=cfg.timeout_s,
            env={**os.environ, **cfg.env},
        )
    except subprocess.TimeoutExpired as e:
        raise DetectorError(f"{label}: timed out after {cfg.timeout_s}s") from e
    except OSError as e:
        raise DetectorError(f"{label}: could not start {argv[0]!r}: {e}") from e

    if result.returncode != 0:
        raise DetectorError(
            f"{label}: exited with code {result.returncode}\n{_tail(result.stderr)}"
        )


class _ExternalTool:
    label = "external"
    prefix = "ext"

    def __init__(self, cfg: ExternalCommandConfig) -> None:
        self.cfg = cfg

    def _call(self, edges: pd.DataFrame, types: np.ndarray, extra: Dict[str, str], read):
        call_dir = _make_call_dir(self.cfg.work_dir, self.prefix)
        try:
            fields = {
                "edgelist": str(write_edgelist(call_dir / "edgelist.txt", edges)),
                "types": str(write_types(call_dir / "types.txt", types)),
                "output": str(call_dir / "output.txt"),
                **extra,
            }
            _run(self.cfg, fields, self.label)
            out = Path(fields["output"])
            if not out.exists():
                raise DetectorError(f"{self.label}: command finished without writing {out}")
            return read(out)
        finally:
            if not self.cfg.keep_work_dir:
                shutil.rmtree(call_dir, ignore_errors=True)


class ExternalBiSBMDetector(_ExternalTool):
    """Runs a biSBM fitting executable once per detect() call."""

    label = "biSBM"
    prefix = "bisbm"

    def detect(
        self,
        edges: pd.DataFrame,
        types: np.ndarray,
        ka: int,
        kb: int,
        deg_corr: bool = True,
    ) -> np.ndarray:
        extra = {
            "ka": str(int(ka)),
            "kb": str(int(kb)),
            "deg_corr": "true" if deg_corr else "false",
        }
        return self._call(edges, types, extra, read_assignment)


def _read_counts(path: Path) -> Tuple[int, int]:
    tokens = path.read_text(encoding="utf-8").split()
    if len(tokens) != 2:
        raise DetectorError(f"MDL: expected 'ka kb' in {path}, got {len(tokens)} tokens")
    try:
        ka, kb = int(tokens[0]), int(tokens[1])
    except ValueError as e:
        raise DetectorError(f"MDL: non-integer community counts in {path}: {tokens}") from e
    if ka < 1 or kb < 1:
        raise DetectorError(f"MDL: community counts must be >= 1, got ka={ka} kb={kb}")
    return ka, kb


class ExternalMDLSelector(_ExternalTool):
    """Runs an MDL community-count search; the tool writes 'ka kb' to {output}."""

    label = "MDL"
    prefix = "mdl"

    def select(self, edges: pd.DataFrame, types: np.ndarray) -> Tuple[int, int]:
        return self._call(edges, types, {}, _read_counts)
