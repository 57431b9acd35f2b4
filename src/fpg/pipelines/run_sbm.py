# src/fpg/pipelines/run_sbm.py
from __future__ import annotations

import argparse
import shlex
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from fpg.detect.base import CommunityCountSelector, CommunityDetector, FixedCommunityCounts
from fpg.detect.external import ExternalBiSBMDetector, ExternalCommandConfig, ExternalMDLSelector
from fpg.graph.formats import write_assignment
from fpg.pipelines import build_bipartite
from fpg.pipelines.attach_clusters import AttachClustersConfig, write_cluster_outputs


def _log(msg: str) -> None:
    print(f"[{datetime.now().strftime('%H:%M:%S')}] {msg}", flush=True)


@dataclass(frozen=True)
class RunSBMConfig:
    build: build_bipartite.BuildBipartiteConfig = field(default_factory=build_bipartite.BuildBipartiteConfig)
    out_dir: Path = Path("outputs/sbm")

    # Fixed community counts; when unset, the MDL command chooses them.
    ka: Optional[int] = None
    kb: Optional[int] = None
    deg_corr: bool = True

    bisbm_command: Tuple[str, ...] = ()
    mdl_command: Tuple[str, ...] = ()
    timeout_s: Optional[float] = None

    def __post_init__(self) -> None:
        if (self.ka is None) != (self.kb is None):
            raise ValueError("Set both ka and kb, or neither (the MDL command then chooses them)")

    @property
    def assignment_path(self) -> Path:
        return self.out_dir / "assignment.txt"

    @property
    def clusters_dir(self) -> Path:
        return self.out_dir / "clusters"


def _default_selector(cfg: RunSBMConfig) -> CommunityCountSelector:
    if cfg.ka is not None and cfg.kb is not None:
        return FixedCommunityCounts(cfg.ka, cfg.kb)
    if cfg.mdl_command:
        return ExternalMDLSelector(ExternalCommandConfig(command=cfg.mdl_command, timeout_s=cfg.timeout_s))
    raise ValueError("Set ka and kb, or provide an MDL command to choose them")


def _default_detector(cfg: RunSBMConfig) -> CommunityDetector:
    if not cfg.bisbm_command:
        raise ValueError("No biSBM command configured and no detector supplied")
    return ExternalBiSBMDetector(ExternalCommandConfig(command=cfg.bisbm_command, timeout_s=cfg.timeout_s))


def run(
    cfg: RunSBMConfig,
    detector: Optional[CommunityDetector] = None,
    selector: Optional[CommunityCountSelector] = None,
) -> Dict[str, Any]:
    """
    End-to-end: records -> graph files -> (ka, kb) -> assignment -> cluster tables.
    detector/selector are injected; defaults wrap the configured commands.
    """
    selector = selector or _default_selector(cfg)
    detector = detector or _default_detector(cfg)

    graph = build_bipartite.run(cfg.build)
    edges, types = graph["edges"], graph["types"]

    ka, kb = selector.select(edges, types)
    _log(f"community counts: ka={ka} kb={kb} (deg_corr={cfg.deg_corr})")

    _log("Running community detection (blocking)")
    assignment = detector.detect(edges, types, ka, kb, cfg.deg_corr)

    out = write_cluster_outputs(
        AttachClustersConfig(
            graph_dir=cfg.build.out_dir,
            assignment_path=cfg.assignment_path,
            out_dir=cfg.clusters_dir,
        ),
        assignment,
        graph["vendor_index"],
        graph["product_index"],
        records=graph["records"],
        extra_meta={"ka": int(ka), "kb": int(kb), "deg_corr": bool(cfg.deg_corr)},
    )
    # persisted only once the length check inside write_cluster_outputs passed
    cfg.out_dir.mkdir(parents=True, exist_ok=True)
    write_assignment(cfg.assignment_path, assignment)
    out["assignment_path"] = str(cfg.assignment_path)
    out["graph"] = graph
    out["ka"], out["kb"] = int(ka), int(kb)
    return out


def main() -> None:
    ap = argparse.ArgumentParser(description="Vendor/product biSBM pipeline")
    build_bipartite.add_source_args(ap)
    ap.add_argument("--out", type=Path, default=RunSBMConfig().out_dir)
    ap.add_argument("--ka", type=int, default=None)
    ap.add_argument("--kb", type=int, default=None)
    ap.add_argument("--no-deg-corr", action="store_true")
    ap.add_argument("--bisbm-cmd", type=str, required=True, help="command template, see fpg.detect.external")
    ap.add_argument("--mdl-cmd", type=str, default="")
    ap.add_argument("--timeout", type=float, default=None)
    args = ap.parse_args()

    cfg = RunSBMConfig(
        build=build_bipartite.BuildBipartiteConfig(
            source=build_bipartite.source_from_args(args),
            out_dir=args.out / "graph",
            min_purchases=args.min_purchases,
        ),
        out_dir=args.out,
        ka=args.ka,
        kb=args.kb,
        deg_corr=not args.no_deg_corr,
        bisbm_command=tuple(shlex.split(args.bisbm_cmd)),
        mdl_command=tuple(shlex.split(args.mdl_cmd)),
        timeout_s=args.timeout,
    )
    out = run(cfg)
    print(f"✅ biSBM run complete (ka={out['ka']}, kb={out['kb']}).")
    print(f" - {out['vendor_clusters_path']}")
    print(f" - {out['product_clusters_path']}")


if __name__ == "__main__":
    main()
