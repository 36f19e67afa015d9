import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Any

import numpy as np
import pandas as pd

from .core.audit import SolverAuditLog
from .core.exceptions import ConfigurationError, DegenerateBranchError
from .pathway import Pathway

logger = logging.getLogger(__name__)

DEGENERATE_POLICIES = ("even", "raise")


@dataclass(frozen=True)
class FluxResult:
    """Steady-state flux through every node and edge of a pathway."""
    node_flux: Dict[str, float]
    edge_flux: Dict[str, float]
    input_flux: float = 1.0
    degenerate_nodes: List[str] = field(default_factory=list)

    @property
    def is_degenerate(self) -> bool:
        """True when at least one branch point fell back to an even split."""
        return bool(self.degenerate_nodes)

    def flux_at(self, node: str) -> float:
        return self.node_flux.get(node, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_flux": self.input_flux,
            "node_flux": dict(self.node_flux),
            "edge_flux": dict(self.edge_flux),
            "degenerate_nodes": list(self.degenerate_nodes),
        }

    def to_frame(self, pathway: Pathway) -> pd.DataFrame:
        """One row per edge with its gene and flux."""
        rows = [
            {
                "edge": edge.key,
                "source": edge.source,
                "target": edge.target,
                "gene": edge.gene,
                "flux": self.edge_flux.get(edge.key, 0.0),
            }
            for edge in pathway.edges
        ]
        return pd.DataFrame(rows, columns=["edge", "source", "target", "gene", "flux"])


class FluxSolver:
    """
    Propagates an input flux through a pathway in topological order.

    A node with one exit is a restrictive step: the exit carries
    `flux * accessibility` and the remainder is lost. A node with several
    exits is a branch point: its flux is split across the exits in proportion
    to their accessibility and is conserved.
    """

    def __init__(
        self,
        pathway: Pathway,
        degenerate_policy: str = "even",
        audit_log: Optional[SolverAuditLog] = None,
        conservation_tolerance: float = 1e-9,
    ):
        if degenerate_policy not in DEGENERATE_POLICIES:
            raise ValueError(
                f"degenerate_policy must be one of {DEGENERATE_POLICIES}, got {degenerate_policy!r}"
            )
        if conservation_tolerance < 0:
            raise ValueError(
                f"conservation_tolerance must be non-negative, got {conservation_tolerance}"
            )

        self.pathway = pathway
        self.degenerate_policy = degenerate_policy
        self.audit_log = audit_log
        self.conservation_tolerance = conservation_tolerance

        self._order = pathway.topological_order
        self._exits = {node: pathway.outgoing(node) for node in self._order}
        self._terminals = [node for node in self._order if not self._exits[node]]

    def solve(self, accessibility: Mapping[str, float], input_flux: float = 1.0) -> FluxResult:
        """
        Compute node and edge flux for one accessibility profile.

        Args:
            accessibility: gene -> accessibility in [0, 1]; must cover every edge gene.
            input_flux: Flux entering at the pathway's input node.

        Returns:
            FluxResult: a fresh result; the solver keeps no state between calls.
        """
        if input_flux < 0:
            raise ValueError(f"input_flux must be non-negative, got {input_flux}")

        missing = [g for g in self.pathway.edge_genes if g not in accessibility]
        if missing:
            raise ConfigurationError(
                f"Accessibility profile missing genes {missing} for pathway '{self.pathway.name}'"
            )

        solve_index = self.audit_log.next_solve() if self.audit_log is not None else 0

        node_flux: Dict[str, float] = {node: 0.0 for node in self._order}
        node_flux[self.pathway.input_node] = float(input_flux)
        edge_flux: Dict[str, float] = {}
        degenerate: List[str] = []

        for node in self._order:
            flux = node_flux[node]
            exits = self._exits[node]

            if not exits:
                continue

            if len(exits) == 1:
                edge = exits[0]
                edge_f = flux * float(accessibility[edge.gene])
                edge_flux[edge.key] = edge_f
                node_flux[edge.target] += edge_f
                continue

            rates = [float(accessibility[e.gene]) for e in exits]
            total_rate = sum(rates)

            if total_rate == 0:
                genes = [e.gene for e in exits]
                if self.degenerate_policy == "raise":
                    raise DegenerateBranchError(node, genes)
                logger.warning(
                    f"Branch '{node}' has zero accessibility on all exits {genes}; splitting evenly."
                )
                if self.audit_log is not None:
                    self.audit_log.log_degenerate_branch(solve_index, node, genes, flux)
                degenerate.append(node)
                shares = [1.0 / len(exits)] * len(exits)
            else:
                shares = [rate / total_rate for rate in rates]

            for edge, share in zip(exits, shares):
                edge_f = flux * share
                edge_flux[edge.key] = edge_f
                node_flux[edge.target] += edge_f

            self._check_conservation(solve_index, node, flux, [edge_flux[e.key] for e in exits])

        if self.audit_log is not None:
            self.audit_log.log_solve(
                solve_index,
                float(input_flux),
                {t: node_flux[t] for t in self._terminals},
                degenerate,
            )

        return FluxResult(
            node_flux=node_flux,
            edge_flux=edge_flux,
            input_flux=float(input_flux),
            degenerate_nodes=degenerate,
        )

    def record(self, result: FluxResult) -> None:
        """
        Write a result solved elsewhere (e.g. in a worker process) into this
        solver's audit log as if it had been solved here.
        """
        if self.audit_log is None:
            return
        solve_index = self.audit_log.next_solve()
        for node in result.degenerate_nodes:
            genes = [e.gene for e in self._exits[node]]
            self.audit_log.log_degenerate_branch(solve_index, node, genes, result.flux_at(node))
        self.audit_log.log_solve(
            solve_index,
            result.input_flux,
            {t: result.flux_at(t) for t in self._terminals},
            list(result.degenerate_nodes),
        )

    def _check_conservation(self, solve_index: int, node: str, incoming: float, outgoing: List[float]) -> None:
        total_out = float(np.sum(outgoing))
        if not np.isclose(total_out, incoming, rtol=0.0, atol=self.conservation_tolerance):
            logger.error(f"Flux not conserved at branch '{node}': in={incoming}, out={total_out}")
            if self.audit_log is not None:
                self.audit_log.log_conservation_violation(solve_index, node, incoming, total_out)


def solve(
    pathway: Pathway,
    accessibility: Mapping[str, float],
    input_flux: float = 1.0,
    degenerate_policy: str = "even",
) -> FluxResult:
    """One-shot solve without keeping a FluxSolver around."""
    return FluxSolver(pathway, degenerate_policy=degenerate_policy).solve(accessibility, input_flux)
