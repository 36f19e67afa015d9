from .pathway import Pathway, Metabolite, MetaboliteType, Gene, Edge, get_ehrlich_pathway
from .accessibility import Intervention, AccessibilityTables, resolve_accessibility, resolve_profile
from .solver import FluxSolver, FluxResult, solve
from .metrics import PathwayMetrics, capture_rate, fold_change, bottleneck_gene, waste_ratio, derive_metrics
from .visualization import classify_accessibility, classify_flow_speed, create_pathway_figure
from .workbench import Workbench, AppState
from .config import WorkbenchConfig

__version__ = "0.1.0"
