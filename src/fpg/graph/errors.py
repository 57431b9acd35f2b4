# src/fpg/graph/errors.py
from __future__ import annotations

from typing import Hashable


class GraphPipelineError(ValueError):
    pass


class EmptyInputError(GraphPipelineError):
    """No vendors or no products left to index."""

    def __init__(self, n_vendors: int, n_products: int) -> None:
        self.n_vendors = n_vendors
        self.n_products = n_products
        super().__init__(
            f"Cannot index an empty bipartite graph: "
            f"{n_vendors} distinct vendors, {n_products} distinct products after filtering"
        )


class UnknownKeyError(GraphPipelineError):
    """A record references a key absent from the node index it was built from."""

    def __init__(self, key: Hashable, node_class: str) -> None:
        self.key = key
        self.node_class = node_class
        super().__init__(f"Unknown {node_class} key {key!r}: not present in the {node_class} index")


class LengthMismatchError(GraphPipelineError):
    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Community assignment length {actual} != node count {expected} (vendors + products)"
        )
