import numpy as np
import pandas as pd

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field, replace
from itertools import combinations, product
import os
import logging
import json
from types import MappingProxyType
from tqdm import tqdm
from typing import Dict, Any, List, Optional, Mapping, Sequence, Tuple, Union

from .accessibility import AccessibilityTables, Intervention, resolve_profile
from .config import WorkbenchConfig
from .core.audit import SolverAuditLog
from .metrics import PathwayMetrics, derive_metrics
from .pathway import Pathway
from .presets import get_preset
from .solver import FluxResult, FluxSolver

logger = logging.getLogger(__name__)

InterventionInput = Mapping[str, Union[Intervention, str, bool]]


@dataclass(frozen=True)
class AppState:
    """
    Immutable application state: the intervention on each controllable gene
    and the gene currently selected in the UI. Transitions return new states.
    """
    interventions: Mapping[str, Intervention] = field(default_factory=dict)
    selected_gene: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "interventions", MappingProxyType(dict(self.interventions)))

    def __hash__(self) -> int:
        return hash((frozenset(self.interventions.items()), self.selected_gene))

    @classmethod
    def initial(cls, pathway: Pathway) -> "AppState":
        return cls(interventions={g: Intervention.NORMAL for g in pathway.controllable_genes})

    @classmethod
    def from_mapping(cls, pathway: Pathway, interventions: InterventionInput) -> "AppState":
        state = cls.initial(pathway)
        for gene, value in interventions.items():
            state = state.with_intervention(gene, value)
        return state

    def with_intervention(self, gene: str, value: Union[Intervention, str, bool]) -> "AppState":
        if gene not in self.interventions:
            raise KeyError(f"Gene '{gene}' is not controllable in this state")
        updated = dict(self.interventions)
        updated[gene] = Intervention.parse(value)
        return replace(self, interventions=updated)

    def toggle(self, gene: str) -> "AppState":
        """Advance a gene to its next intervention (normal -> activate -> repress)."""
        return self.with_intervention(gene, self.interventions[gene].next())

    def select_gene(self, gene: Optional[str]) -> "AppState":
        """Select a gene; selecting the already selected gene clears the selection."""
        return replace(self, selected_gene=None if gene == self.selected_gene else gene)

    def reset(self) -> "AppState":
        return replace(
            self,
            interventions={g: Intervention.NORMAL for g in self.interventions},
        )

    @property
    def active_genes(self) -> List[str]:
        return [g for g, v in self.interventions.items() if v != Intervention.NORMAL]

    @property
    def has_active_interventions(self) -> bool:
        return bool(self.active_genes)

    def describe(self) -> str:
        active = self.active_genes
        if not active:
            return "baseline"
        return ", ".join(f"{g}={self.interventions[g].value}" for g in active)


@dataclass(frozen=True)
class WorkbenchResult:
    state: AppState
    accessibility: Dict[str, float]
    result: FluxResult
    metrics: PathwayMetrics


def _screen_worker(args) -> Tuple[Dict[str, Any], FluxResult]:
    """Solves one candidate intervention set in a separate process."""
    (pathway, tables, interventions, input_flux, degenerate_policy,
     conservation_tolerance, baseline_result) = args
    solver = FluxSolver(
        pathway,
        degenerate_policy=degenerate_policy,
        conservation_tolerance=conservation_tolerance,
    )
    accessibility = resolve_profile(pathway, interventions, tables)
    result = solver.solve(accessibility, input_flux)
    metrics = derive_metrics(result, baseline_result, pathway, accessibility)
    return _screen_row(interventions, result, metrics), result


def _screen_row(interventions: Mapping[str, Intervention], result: FluxResult, metrics: PathwayMetrics) -> Dict[str, Any]:
    active = {g: v for g, v in interventions.items() if v != Intervention.NORMAL}
    return {
        "interventions": ", ".join(f"{g}={v.value}" for g, v in active.items()) or "baseline",
        "n_changes": len(active),
        "product_flux": metrics.product_flux,
        "waste_flux": metrics.waste_flux,
        "capture_rate": metrics.capture_rate,
        "fold_change": metrics.fold_change,
        "bottleneck_gene": metrics.bottleneck_gene,
        "degenerate": result.is_degenerate,
    }


class Workbench:
    """Chromatin-gated flux workbench: solve, compare, sweep and screen interventions."""

    def __init__(
        self,
        pathway: Optional[Pathway] = None,
        tables: Optional[AccessibilityTables] = None,
        config: Optional[WorkbenchConfig] = None,
        audit_log: Optional[SolverAuditLog] = None,
    ):
        """
        Initialize the Workbench.

        Args:
            pathway (Pathway, optional): Pathway topology; defaults to the config preset
            tables (AccessibilityTables, optional): Accessibility per intervention state
            config (WorkbenchConfig, optional): Solver and output settings
            audit_log (SolverAuditLog, optional): Audit log shared with the solver
        """
        self.config = config or WorkbenchConfig()

        if pathway is None or tables is None:
            preset_pathway, preset_tables = get_preset(self.config.preset)
            pathway = pathway or preset_pathway
            tables = tables or preset_tables

        tables.check_covers(pathway)

        self.pathway = pathway
        self.tables = tables
        self.audit_log = audit_log or SolverAuditLog()
        self.solver = FluxSolver(
            pathway,
            degenerate_policy=self.config.degenerate_policy,
            audit_log=self.audit_log,
            conservation_tolerance=self.config.conservation_tolerance,
        )

        self.baseline_accessibility = resolve_profile(pathway, {}, tables)
        self.baseline_result = self.solver.solve(self.baseline_accessibility, self.config.input_flux)
        logger.info(
            f"Workbench ready for '{pathway.name}': baseline product flux "
            f"{self.baseline_result.flux_at(pathway.product_node) if pathway.product_node else 0.0:.4f}"
        )

    def initial_state(self) -> AppState:
        return AppState.initial(self.pathway)

    def _as_state(self, state: Optional[Union[AppState, InterventionInput]]) -> AppState:
        if state is None:
            return self.initial_state()
        if isinstance(state, AppState):
            return state
        return AppState.from_mapping(self.pathway, state)

    def run(self, state: Optional[Union[AppState, InterventionInput]] = None) -> WorkbenchResult:
        """Resolve accessibility for a state, solve, and derive metrics against the baseline."""
        app_state = self._as_state(state)
        accessibility = resolve_profile(self.pathway, app_state.interventions, self.tables)
        result = self.solver.solve(accessibility, self.config.input_flux)
        metrics = derive_metrics(result, self.baseline_result, self.pathway, accessibility)
        return WorkbenchResult(
            state=app_state,
            accessibility=accessibility,
            result=result,
            metrics=metrics,
        )

    def sweep_accessibility(
        self,
        gene: str,
        values: Optional[Sequence[float]] = None,
        state: Optional[Union[AppState, InterventionInput]] = None,
    ) -> pd.DataFrame:
        """
        Solve with one gene's accessibility overridden across a range of values.

        Args:
            gene (str): Edge gene to sweep
            values (sequence, optional): Accessibility values in [0, 1];
                defaults to config.sweep_points evenly spaced values
            state (AppState or mapping, optional): Interventions for the other genes

        Returns:
            pd.DataFrame: one row per value with terminal flux and metrics
        """
        if gene not in self.pathway.edge_genes:
            raise ValueError(f"Gene '{gene}' does not gate any edge of '{self.pathway.name}'")

        if values is None:
            values = np.linspace(0.0, 1.0, self.config.sweep_points)
        values = np.asarray(values, dtype=float)
        if values.size == 0:
            raise ValueError("values cannot be empty")
        if np.any((values < 0) | (values > 1)):
            raise ValueError("sweep values must lie in [0, 1]")

        app_state = self._as_state(state)
        base_profile = resolve_profile(self.pathway, app_state.interventions, self.tables)

        rows = []
        for value in values:
            accessibility = dict(base_profile)
            accessibility[gene] = float(value)
            result = self.solver.solve(accessibility, self.config.input_flux)
            metrics = derive_metrics(result, self.baseline_result, self.pathway, accessibility)
            edge_flux = {f"flux_{k}": v for k, v in result.edge_flux.items()}
            rows.append({
                "gene": gene,
                "accessibility": float(value),
                "product_flux": metrics.product_flux,
                "waste_flux": metrics.waste_flux,
                "capture_rate": metrics.capture_rate,
                "fold_change": metrics.fold_change,
                "degenerate": result.is_degenerate,
                **edge_flux,
            })

        return pd.DataFrame(rows)

    def candidate_interventions(self, max_genes: int = 1) -> List[Dict[str, Intervention]]:
        """Every intervention set that changes between 1 and max_genes controllable genes."""
        if max_genes < 1:
            raise ValueError(f"max_genes must be at least 1, got {max_genes}")
        genes = self.pathway.controllable_genes
        candidates = []
        for k in range(1, min(max_genes, len(genes)) + 1):
            for subset in combinations(genes, k):
                for choice in product((Intervention.ACTIVATE, Intervention.REPRESS), repeat=k):
                    interventions = {g: Intervention.NORMAL for g in genes}
                    interventions.update(zip(subset, choice))
                    candidates.append(interventions)
        return candidates

    def screen_interventions(self, max_genes: int = 1, n_jobs: Optional[int] = None) -> pd.DataFrame:
        """
        Evaluates every candidate intervention set and ranks them by product flux.
        Solves are independent, so they can be farmed out to worker processes.

        Args:
            max_genes (int): Largest number of genes changed at once
            n_jobs (int, optional): Parallel workers (-1 for CPU count); defaults to config.n_jobs

        Returns:
            pd.DataFrame: baseline row plus one row per candidate, best first
        """
        candidates = self.candidate_interventions(max_genes)
        n_jobs = self.config.n_jobs if n_jobs is None else n_jobs
        if n_jobs == -1:
            n_jobs = os.cpu_count() or 1

        logger.info(f"Screening {len(candidates)} intervention sets (workers={n_jobs})")

        baseline_metrics = derive_metrics(
            self.baseline_result, self.baseline_result, self.pathway, self.baseline_accessibility
        )
        rows = [_screen_row(self.initial_state().interventions, self.baseline_result, baseline_metrics)]

        if n_jobs > 1:
            args = [
                (self.pathway, self.tables, c, self.config.input_flux,
                 self.config.degenerate_policy, self.config.conservation_tolerance,
                 self.baseline_result)
                for c in candidates
            ]
            with ProcessPoolExecutor(max_workers=n_jobs) as executor:
                iterator = executor.map(_screen_worker, args)
                for row, result in tqdm(iterator, total=len(args), desc="Screen", disable=len(args) < 2):
                    # worker solvers have no audit log; record their results here
                    self.solver.record(result)
                    rows.append(row)
        else:
            for interventions in tqdm(candidates, desc="Sequential screen", disable=len(candidates) < 2):
                run = self.run(AppState(interventions=interventions))
                rows.append(_screen_row(interventions, run.result, run.metrics))

        frame = pd.DataFrame(rows)
        frame = frame.sort_values("product_flux", ascending=False, kind="mergesort").reset_index(drop=True)
        return frame

    def export_results_json(self, run: WorkbenchResult, file_path: str):
        """
        Exports a solve, its metrics and the inputs that produced it to JSON.
        """
        export_data: Dict[str, Any] = {
            "metadata": {
                "pathway": self.pathway.name,
                "input_flux": run.result.input_flux,
                "degenerate_policy": self.config.degenerate_policy,
            },
            "interventions": {g: v.value for g, v in run.state.interventions.items()},
            "accessibility": run.accessibility,
            "flux": run.result.to_dict(),
            "baseline_flux": self.baseline_result.to_dict(),
            "metrics": run.metrics.to_dict(),
        }

        os.makedirs(os.path.dirname(os.path.abspath(file_path)), exist_ok=True)
        with open(file_path, "w") as f:
            json.dump(export_data, f, indent=2)
        logger.info(f"Successfully exported results to {file_path}")

    def export_screen(self, frame: pd.DataFrame, file_path: str):
        """
        Exports an intervention screen to a Parquet file.
        """
        os.makedirs(os.path.dirname(os.path.abspath(file_path)), exist_ok=True)
        frame.to_parquet(file_path, index=False)
        logger.info(f"Successfully exported {len(frame)} rows to {file_path}")
