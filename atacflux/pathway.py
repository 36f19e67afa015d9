import json
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Mapping

from .core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class MetaboliteType(Enum):
    INPUT = "input"
    INTERMEDIATE = "intermediate"
    BRANCH = "branch"
    PRODUCT = "product"
    WASTE = "waste"


@dataclass(frozen=True)
class Metabolite:
    id: str
    name: str
    type: MetaboliteType
    short: Optional[str] = None

    @property
    def label(self) -> str:
        return self.short or self.name


@dataclass(frozen=True)
class Gene:
    """Enzyme metadata for the gene that catalyses an edge."""
    id: str
    name: str
    systematic_name: Optional[str] = None
    ec: Optional[str] = None
    passive: bool = False


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    gene: str

    @property
    def key(self) -> str:
        """Edge-flux key, 'from-to'."""
        return f"{self.source}-{self.target}"


class Pathway:
    """
    Static metabolic pathway: metabolites connected by gene-catalysed edges.

    The pathway is validated once at construction and is read-only afterwards.
    Adjacency and a topological order are computed here so that every solve
    reuses them instead of rediscovering the graph.
    """

    def __init__(
        self,
        metabolites: List[Metabolite],
        genes: List[Gene],
        edges: List[Edge],
        name: str = "custom_pathway",
    ):
        self.name = name
        self._metabolites: Dict[str, Metabolite] = {}
        for met in metabolites:
            if met.id in self._metabolites:
                raise ConfigurationError(f"Duplicate metabolite id '{met.id}' in pathway '{name}'")
            self._metabolites[met.id] = met

        self._genes: Dict[str, Gene] = {}
        for gene in genes:
            if gene.id in self._genes:
                raise ConfigurationError(f"Duplicate gene id '{gene.id}' in pathway '{name}'")
            self._genes[gene.id] = gene

        self._edges: tuple = tuple(edges)
        self._outgoing: Dict[str, List[Edge]] = {m: [] for m in self._metabolites}
        self._incoming: Dict[str, List[Edge]] = {m: [] for m in self._metabolites}

        self._validate()
        self._topological_order = self._compute_topological_order()
        logger.debug(
            f"Pathway '{name}' built: {len(self._metabolites)} metabolites, "
            f"{len(self._edges)} edges, order={self._topological_order}"
        )

    def _validate(self) -> None:
        inputs = [m.id for m in self._metabolites.values() if m.type == MetaboliteType.INPUT]
        if len(inputs) != 1:
            raise ConfigurationError(
                f"Pathway '{self.name}' must have exactly one input metabolite, found {inputs}"
            )

        for edge in self._edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in self._metabolites:
                    raise ConfigurationError(
                        f"Edge {edge.key} references unknown metabolite '{endpoint}'"
                    )
            if edge.gene not in self._genes:
                raise ConfigurationError(f"Edge {edge.key} references unknown gene '{edge.gene}'")
            if any(e.gene == edge.gene for e in self._outgoing[edge.source]):
                raise ConfigurationError(
                    f"Gene '{edge.gene}' used twice on exits of '{edge.source}'"
                )
            self._outgoing[edge.source].append(edge)
            self._incoming[edge.target].append(edge)

    def _compute_topological_order(self) -> List[str]:
        # Kahn's algorithm; ties resolved by metabolite insertion order.
        in_degree = {m: len(self._incoming[m]) for m in self._metabolites}
        ready = deque(m for m in self._metabolites if in_degree[m] == 0)
        order = []
        while ready:
            node = ready.popleft()
            order.append(node)
            for edge in self._outgoing[node]:
                in_degree[edge.target] -= 1
                if in_degree[edge.target] == 0:
                    ready.append(edge.target)

        if len(order) != len(self._metabolites):
            cyclic = [m for m in self._metabolites if m not in order]
            raise ConfigurationError(f"Pathway '{self.name}' contains a cycle through {cyclic}")
        return order

    @property
    def metabolites(self) -> Mapping[str, Metabolite]:
        return dict(self._metabolites)

    @property
    def genes(self) -> Mapping[str, Gene]:
        return dict(self._genes)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    @property
    def topological_order(self) -> List[str]:
        return list(self._topological_order)

    @property
    def input_node(self) -> str:
        return self.nodes_of_type(MetaboliteType.INPUT)[0]

    @property
    def edge_genes(self) -> List[str]:
        """Genes that gate at least one edge, in edge order."""
        seen: List[str] = []
        for edge in self._edges:
            if edge.gene not in seen:
                seen.append(edge.gene)
        return seen

    @property
    def controllable_genes(self) -> List[str]:
        """Edge genes that accept interventions (everything but passive genes)."""
        return [g for g in self.edge_genes if not self._genes[g].passive]

    @property
    def product_node(self) -> Optional[str]:
        products = self.nodes_of_type(MetaboliteType.PRODUCT)
        return products[0] if products else None

    @property
    def waste_node(self) -> Optional[str]:
        wastes = self.nodes_of_type(MetaboliteType.WASTE)
        return wastes[0] if wastes else None

    def nodes_of_type(self, met_type: MetaboliteType) -> List[str]:
        return [m.id for m in self._metabolites.values() if m.type == met_type]

    def outgoing(self, node: str) -> List[Edge]:
        return list(self._outgoing.get(node, []))

    def incoming(self, node: str) -> List[Edge]:
        return list(self._incoming.get(node, []))

    def is_branch_point(self, node: str) -> bool:
        return len(self._outgoing.get(node, [])) > 1

    def gene_accessibility(self, gene: str, table: Mapping[str, float]) -> float:
        """Look up a gene in an accessibility table, failing on a missing gene."""
        if gene not in table:
            raise ConfigurationError(f"Gene '{gene}' missing from accessibility table")
        return float(table[gene])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pathway":
        """
        Build a pathway from a plain dictionary.

        Expected keys: 'metabolites' (id -> {name, type, short}), 'genes'
        (id -> {name, systematic_name, ec, passive}) and 'edges'
        (list of {from, to, gene}).
        """
        try:
            metabolites = [
                Metabolite(
                    id=met_id,
                    name=entry["name"],
                    type=MetaboliteType(entry["type"]),
                    short=entry.get("short"),
                )
                for met_id, entry in data["metabolites"].items()
            ]
            genes = [
                Gene(
                    id=gene_id,
                    name=entry.get("name", gene_id),
                    systematic_name=entry.get("systematic_name"),
                    ec=entry.get("ec"),
                    passive=bool(entry.get("passive", False)),
                )
                for gene_id, entry in data["genes"].items()
            ]
            edges = [Edge(source=e["from"], target=e["to"], gene=e["gene"]) for e in data["edges"]]
        except (KeyError, ValueError) as e:
            raise ConfigurationError(f"Invalid pathway definition: {e}") from e

        return cls(metabolites, genes, edges, name=data.get("name", "unnamed_pathway"))

    @classmethod
    def from_json(cls, json_path: str) -> "Pathway":
        """Loads a pathway from a JSON file."""
        with open(json_path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "metabolites": {
                m.id: {"name": m.name, "short": m.short, "type": m.type.value}
                for m in self._metabolites.values()
            },
            "genes": {
                g.id: {
                    "name": g.name,
                    "systematic_name": g.systematic_name,
                    "ec": g.ec,
                    "passive": g.passive,
                }
                for g in self._genes.values()
            },
            "edges": [{"from": e.source, "to": e.target, "gene": e.gene} for e in self._edges],
        }

    def __repr__(self) -> str:
        return f"Pathway(name={self.name!r}, metabolites={len(self._metabolites)}, edges={len(self._edges)})"


def get_ehrlich_pathway() -> Pathway:
    """Leucine catabolism to isoamyl acetate, with fusel alcohol export as the competing branch."""
    return Pathway(
        metabolites=[
            Metabolite("leu", "L-Leucine", MetaboliteType.INPUT, short="Leu"),
            Metabolite("kic", "α-ketoisocaproate", MetaboliteType.INTERMEDIATE, short="KIC"),
            Metabolite("mbal", "3-methylbutanal", MetaboliteType.INTERMEDIATE, short="3-MB-al"),
            Metabolite("iamoh", "isoamylol", MetaboliteType.BRANCH, short="IAM-OH"),
            Metabolite("iamac", "isoamyl acetate", MetaboliteType.PRODUCT, short="IAM-Ac"),
            Metabolite("waste", "fusel alcohol export", MetaboliteType.WASTE, short="waste"),
        ],
        genes=[
            Gene("BAT2", "branched-chain aminotransferase", "YJR148W", "2.6.1.42"),
            Gene("ARO10", "phenylpyruvate decarboxylase", "YDR380W", "4.1.1.43"),
            Gene("ADH6", "alcohol dehydrogenase", "YMR318C", "1.1.1.1"),
            Gene("ATF1", "alcohol acetyltransferase", "YOR377W", "2.3.1.84"),
            Gene("EXPORT", "passive export", passive=True),
        ],
        edges=[
            Edge("leu", "kic", "BAT2"),
            Edge("kic", "mbal", "ARO10"),
            Edge("mbal", "iamoh", "ADH6"),
            Edge("iamoh", "iamac", "ATF1"),
            Edge("iamoh", "waste", "EXPORT"),
        ],
        name="Ehrlich_Isoamyl_Acetate",
    )
