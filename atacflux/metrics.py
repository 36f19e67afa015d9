"""Summary metrics over solver output.

An undefined metric (zero denominator) is returned as ``None`` so that a
display layer cannot mistake it for 0% or an infinite fold change.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, Iterable, Mapping, Optional

from .pathway import Pathway
from .solver import FluxResult

logger = logging.getLogger(__name__)


def capture_rate(result: FluxResult, product: str, waste: str) -> Optional[float]:
    """Fraction of terminal flux that reached the product rather than the waste node."""
    product_flux = result.flux_at(product)
    total = product_flux + result.flux_at(waste)
    if total == 0:
        return None
    return product_flux / total


def waste_ratio(result: FluxResult, product: str, waste: str) -> Optional[float]:
    rate = capture_rate(result, product, waste)
    return None if rate is None else 1.0 - rate


def fold_change(current: FluxResult, baseline: FluxResult, product: str) -> Optional[float]:
    """Product flux relative to the baseline solve."""
    baseline_flux = baseline.flux_at(product)
    if baseline_flux == 0:
        logger.debug(f"Fold change undefined: baseline flux at '{product}' is zero")
        return None
    return current.flux_at(product) / baseline_flux


def bottleneck_gene(accessibility: Mapping[str, float], genes: Iterable[str]) -> Optional[str]:
    """Least accessible gene; the first in `genes` order wins a tie."""
    best = None
    for gene in genes:
        if best is None or accessibility[gene] < accessibility[best]:
            best = gene
    return best


@dataclass(frozen=True)
class PathwayMetrics:
    capture_rate: Optional[float]
    fold_change: Optional[float]
    bottleneck_gene: Optional[str]
    waste_ratio: Optional[float]
    product_flux: float
    waste_flux: float

    def format_percent(self) -> str:
        if self.capture_rate is None:
            return "n/a"
        return f"{self.capture_rate * 100:.1f}%"

    def format_fold(self) -> str:
        if self.fold_change is None:
            return "n/a"
        return f"{self.fold_change:.1f}×"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def derive_metrics(
    result: FluxResult,
    baseline: FluxResult,
    pathway: Pathway,
    accessibility: Mapping[str, float],
) -> PathwayMetrics:
    """Capture rate, fold change vs. baseline and bottleneck gene for one solve."""
    product = pathway.product_node
    waste = pathway.waste_node
    if product is None or waste is None:
        logger.warning(f"Pathway '{pathway.name}' lacks a product or waste terminal; capture rate undefined")
        rate = None
    else:
        rate = capture_rate(result, product, waste)

    return PathwayMetrics(
        capture_rate=rate,
        fold_change=fold_change(result, baseline, product) if product else None,
        bottleneck_gene=bottleneck_gene(accessibility, pathway.controllable_genes),
        waste_ratio=None if rate is None else 1.0 - rate,
        product_flux=result.flux_at(product) if product else 0.0,
        waste_flux=result.flux_at(waste) if waste else 0.0,
    )
