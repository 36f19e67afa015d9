import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, FrozenSet, Union

from .core.exceptions import ConfigurationError
from .pathway import Pathway

logger = logging.getLogger(__name__)


class Intervention(Enum):
    """Chromatin intervention applied to a gene (dCas9 activation or repression)."""
    NORMAL = "normal"
    ACTIVATE = "activate"
    REPRESS = "repress"

    @classmethod
    def parse(cls, value: Union["Intervention", str, bool]) -> "Intervention":
        """
        Accepts enum members, their string values, or the legacy on/off booleans.
        A boolean True means ACTIVATE and False means NORMAL.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.ACTIVATE if value else cls.NORMAL
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError(
            f"Unknown intervention {value!r}; expected one of {[m.value for m in cls]}"
        )

    def next(self) -> "Intervention":
        """Cycle normal -> activate -> repress -> normal."""
        order = [Intervention.NORMAL, Intervention.ACTIVATE, Intervention.REPRESS]
        return order[(order.index(self) + 1) % len(order)]


@dataclass(frozen=True)
class AccessibilityTables:
    """
    Chromatin accessibility of every gene under the three intervention states.

    Activation never lowers accessibility and repression never raises it.
    Passive genes have no intervention control, so their value is the same in
    all three tables.
    """
    baseline: Mapping[str, float]
    activated: Mapping[str, float]
    repressed: Mapping[str, float]
    passive_genes: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for table_name in ("baseline", "activated", "repressed"):
            object.__setattr__(self, table_name, dict(getattr(self, table_name)))
        object.__setattr__(self, "passive_genes", frozenset(self.passive_genes))

        genes = set(self.baseline)
        if set(self.activated) != genes or set(self.repressed) != genes:
            raise ConfigurationError(
                "Accessibility tables must cover the same genes: "
                f"baseline={sorted(genes)}, activated={sorted(self.activated)}, "
                f"repressed={sorted(self.repressed)}"
            )

        for table_name in ("baseline", "activated", "repressed"):
            for gene, value in getattr(self, table_name).items():
                if not 0.0 <= value <= 1.0:
                    raise ConfigurationError(
                        f"{table_name} accessibility for {gene} must be in [0, 1], got {value}"
                    )

        for gene in genes:
            low, base, high = self.repressed[gene], self.baseline[gene], self.activated[gene]
            if gene in self.passive_genes:
                if not low == base == high:
                    raise ConfigurationError(
                        f"Passive gene {gene} must have constant accessibility, got "
                        f"repressed={low}, baseline={base}, activated={high}"
                    )
            elif not low <= base <= high:
                raise ConfigurationError(
                    f"Accessibility ordering violated for {gene}: "
                    f"repressed={low} <= baseline={base} <= activated={high} does not hold"
                )

        missing_passive = set(self.passive_genes) - genes
        if missing_passive:
            raise ConfigurationError(f"Passive genes {sorted(missing_passive)} missing from tables")

    @property
    def genes(self):
        return list(self.baseline)

    def table_for(self, state: Intervention) -> Mapping[str, float]:
        if state == Intervention.ACTIVATE:
            return self.activated
        if state == Intervention.REPRESS:
            return self.repressed
        return self.baseline

    def check_covers(self, pathway: Pathway) -> None:
        """
        Fail fast when a pathway edge gene has no accessibility entry, or when
        the pathway and the tables disagree on which edge genes are passive.
        """
        missing = [g for g in pathway.edge_genes if g not in self.baseline]
        if missing:
            raise ConfigurationError(
                f"Accessibility tables missing genes {missing} used by pathway '{pathway.name}'"
            )

        edge_genes = set(pathway.edge_genes)
        pathway_passive = {g for g in edge_genes if pathway.genes[g].passive}
        table_passive = set(self.passive_genes) & edge_genes
        if pathway_passive != table_passive:
            raise ConfigurationError(
                f"Passive genes disagree for pathway '{pathway.name}': "
                f"pathway marks {sorted(pathway_passive)}, tables mark {sorted(table_passive)}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, float]]) -> "AccessibilityTables":
        try:
            return cls(
                baseline=dict(data["baseline"]),
                activated=dict(data["activated"]),
                repressed=dict(data["repressed"]),
                passive_genes=frozenset(data.get("passive", [])),
            )
        except KeyError as e:
            raise ConfigurationError(f"Accessibility tables missing section {e}") from e

    def to_dict(self) -> Dict[str, object]:
        return {
            "baseline": dict(self.baseline),
            "activated": dict(self.activated),
            "repressed": dict(self.repressed),
            "passive": sorted(self.passive_genes),
        }


def resolve_accessibility(
    gene: str,
    state: Optional[Union[Intervention, str, bool]],
    tables: AccessibilityTables,
) -> float:
    """
    Numeric accessibility of `gene` under an intervention state.

    Passive genes resolve to their baseline whatever state is passed, and a
    missing state counts as NORMAL.
    """
    if gene not in tables.baseline:
        raise ConfigurationError(f"Gene '{gene}' not found in accessibility tables")
    if gene in tables.passive_genes or state is None:
        return float(tables.baseline[gene])
    return float(tables.table_for(Intervention.parse(state))[gene])


def resolve_profile(
    pathway: Pathway,
    interventions: Mapping[str, Union[Intervention, str, bool]],
    tables: AccessibilityTables,
) -> Dict[str, float]:
    """Accessibility of every edge gene of `pathway` under `interventions`."""
    tables.check_covers(pathway)
    unknown = [g for g in interventions if g not in pathway.genes]
    if unknown:
        logger.warning(f"Ignoring interventions on genes not in pathway '{pathway.name}': {unknown}")
    return {
        gene: resolve_accessibility(gene, interventions.get(gene), tables)
        for gene in pathway.edge_genes
    }
