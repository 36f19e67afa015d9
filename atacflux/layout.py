"""
Layout geometry for pathway diagrams.

Positions are a pure function of the pathway topology and a declarative
LayoutConfig: the unbranched spine from the input node stacks down the main
column, and nodes after the first branch point sit on one row below it, in the
product or waste column.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from .pathway import Pathway, MetaboliteType


@dataclass(frozen=True)
class Padding:
    top: float = 70
    bottom: float = 50
    left: float = 80
    right: float = 80


@dataclass(frozen=True)
class BoxSize:
    width: float
    height: float
    rx: float


@dataclass(frozen=True)
class LayoutConfig:
    """Layout constants; columns are fractions of the view box width."""
    width: float = 700
    base_height: float = 650
    padding: Padding = field(default_factory=Padding)

    main_column: float = 0.5
    product_column: float = 0.85
    waste_column: float = 0.15

    metabolite: BoxSize = field(default_factory=lambda: BoxSize(160, 42, 8))
    enzyme: BoxSize = field(default_factory=lambda: BoxSize(72, 28, 14))  # pill shape

    node_gap: float = 130  # vertical gap between spine nodes
    branch_gap: float = 60  # extra gap before the branch row
    arrow_padding: float = 14
    branch_enzyme_offset: float = 30

    main_thickness: float = 4
    branch_thickness: float = 3
    dash_array: str = "6 5"
    arrow_head_size: float = 5

    chromatin_bar_width: float = 54
    chromatin_bar_height: float = 6

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError(f"width must be positive, got {self.width}")
        for name in ("main_column", "product_column", "waste_column"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be a fraction in [0, 1], got {value}")
        if self.node_gap <= 0:
            raise ValueError(f"node_gap must be positive, got {self.node_gap}")


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class EnzymePosition:
    x: float
    y: float
    gene: str
    is_main_path: bool


@dataclass
class PathwayLayout:
    positions: Dict[str, Point]
    enzyme_positions: Dict[str, EnzymePosition]  # keyed by edge key
    main_path: List[str]
    branch_nodes: List[str]
    view_box_width: float
    view_box_height: float
    branch_y: float
    config: LayoutConfig


def find_main_path(pathway: Pathway) -> List[str]:
    """Walk single exits from the input node; the first branch point ends the spine."""
    main_path: List[str] = []
    current: Optional[str] = pathway.input_node
    while current is not None and current not in main_path:
        main_path.append(current)
        exits = pathway.outgoing(current)
        current = exits[0].target if len(exits) == 1 else None
    return main_path


def compute_layout(pathway: Pathway, config: Optional[LayoutConfig] = None) -> PathwayLayout:
    """Compute node, enzyme and view-box geometry for a pathway."""
    config = config or LayoutConfig()
    metabolites = pathway.metabolites

    main_path = find_main_path(pathway)
    branch_nodes = [m for m in pathway.topological_order if m not in main_path]

    positions: Dict[str, Point] = {}
    start_y = config.padding.top + config.metabolite.height / 2
    main_x = config.width * config.main_column

    for i, node in enumerate(main_path):
        positions[node] = Point(main_x, start_y + i * config.node_gap)

    branch_y = positions[main_path[-1]].y + config.node_gap + config.branch_gap

    column_for = {
        MetaboliteType.PRODUCT: config.product_column,
        MetaboliteType.WASTE: config.waste_column,
    }
    used_rows: Dict[float, int] = {}
    for node in branch_nodes:
        column = column_for.get(metabolites[node].type, config.main_column)
        row = used_rows.get(column, 0)
        used_rows[column] = row + 1
        positions[node] = Point(config.width * column, branch_y + row * config.node_gap)

    enzyme_positions: Dict[str, EnzymePosition] = {}
    for edge in pathway.edges:
        src, dst = positions[edge.source], positions[edge.target]
        if src.x == dst.x:
            enzyme_positions[edge.key] = EnzymePosition(
                src.x, (src.y + dst.y) / 2, edge.gene, is_main_path=True
            )
        else:
            enzyme_positions[edge.key] = EnzymePosition(
                (src.x + dst.x) / 2,
                (src.y + dst.y) / 2 + config.branch_enzyme_offset,
                edge.gene,
                is_main_path=False,
            )

    max_y = max(p.y for p in positions.values())
    view_box_height = max_y + config.padding.bottom + config.metabolite.height

    return PathwayLayout(
        positions=positions,
        enzyme_positions=enzyme_positions,
        main_path=main_path,
        branch_nodes=branch_nodes,
        view_box_width=config.width,
        view_box_height=view_box_height,
        branch_y=branch_y,
        config=config,
    )


def edge_path(src: Point, dst: Point, node_height: float, config: Optional[LayoutConfig] = None) -> Dict[str, Any]:
    """
    Drawing data for an edge: a straight segment between stacked nodes,
    or an L-shaped SVG path down and across to a branch terminal.
    """
    config = config or LayoutConfig()
    padding = config.arrow_padding

    if src.x == dst.x:
        return {
            "type": "vertical",
            "x1": src.x,
            "y1": src.y + node_height / 2 + padding,
            "x2": dst.x,
            "y2": dst.y - node_height / 2 - padding,
        }

    start_y = src.y + node_height / 2 + padding
    mid_y = src.y + (dst.y - src.y) * 0.4
    return {
        "type": "branch",
        "path": f"M {src.x} {start_y} L {src.x} {mid_y} L {dst.x} {dst.y}",
        "points": [(src.x, start_y), (src.x, mid_y), (dst.x, dst.y)],
        "end_x": dst.x,
        "end_y": dst.y,
    }
