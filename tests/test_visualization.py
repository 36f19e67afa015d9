import unittest
import pytest
from atacflux.visualization import (
    AccessibilityBand, FlowSpeed, BAND_COLORS,
    classify_accessibility, accessibility_color, classify_flow_speed, classify_flux_speed,
    flux_color, flux_width, edge_display_rate, create_pathway_figure, create_sweep_figure,
)
from atacflux.pathway import get_ehrlich_pathway
from atacflux.solver import solve
from atacflux.workbench import Workbench

BASELINE = {"BAT2": 0.65, "ARO10": 0.72, "ADH6": 0.68, "ATF1": 0.06, "EXPORT": 0.30}


@pytest.mark.parametrize("value, band", [
    (1.0, AccessibilityBand.OPEN),
    (0.6, AccessibilityBand.OPEN),
    (0.5999, AccessibilityBand.MODERATE),
    (0.4, AccessibilityBand.MODERATE),
    (0.3999, AccessibilityBand.RESTRICTED),
    (0.2, AccessibilityBand.RESTRICTED),
    (0.1999, AccessibilityBand.CLOSED),
    (0.0, AccessibilityBand.CLOSED),
])
def test_accessibility_bands(value, band):
    assert classify_accessibility(value) == band


def test_band_colors():
    assert accessibility_color(0.72) == "#22c55e"
    assert accessibility_color(0.45) == "#3b82f6"
    assert accessibility_color(0.30) == "#f97316"
    assert accessibility_color(0.06) == "#ef4444"
    assert len(set(BAND_COLORS.values())) == 4


@pytest.mark.parametrize("rate, speed", [
    (0.71, FlowSpeed.FAST),
    (0.7, FlowSpeed.MEDIUM),
    (0.31, FlowSpeed.MEDIUM),
    (0.3, FlowSpeed.SLOW),
    (0.0, FlowSpeed.SLOW),
])
def test_flow_speed_bands(rate, speed):
    assert classify_flow_speed(rate) == speed


def test_flux_speed_and_width():
    assert classify_flux_speed(0.15) == FlowSpeed.FAST
    assert classify_flux_speed(0.08) == FlowSpeed.MEDIUM
    assert classify_flux_speed(0.05) == FlowSpeed.SLOW
    assert flux_width(0.0) == 2
    assert flux_width(0.5) == 6
    assert flux_width(1.0) == 8


def test_flux_color_scale():
    assert flux_color(0.1) == "#ef4444"
    assert flux_color(0.3) == "#f97316"
    assert flux_color(0.5) == "#eab308"
    assert flux_color(0.7) == "#22c55e"
    assert flux_color(0.9) == "#10b981"


class TestPathwayFigure(unittest.TestCase):
    def setUp(self):
        self.pathway = get_ehrlich_pathway()
        self.result = solve(self.pathway, BASELINE)

    def test_passive_edge_uses_waste_ratio(self):
        rate = edge_display_rate(self.pathway, "EXPORT", self.result, BASELINE)
        self.assertAlmostEqual(rate, 5 / 6)
        self.assertEqual(edge_display_rate(self.pathway, "ATF1", self.result, BASELINE), 0.06)

    def test_create_pathway_figure(self):
        fig = create_pathway_figure(self.pathway, self.result, BASELINE)
        self.assertEqual(type(fig).__name__, 'Figure')
        names = [t.name for t in fig.data]
        for edge in self.pathway.edges:
            self.assertIn(edge.key, names)
        for gene in self.pathway.controllable_genes:
            self.assertIn(gene, names)
        self.assertNotIn("EXPORT", names)

    def test_bottleneck_highlight(self):
        fig = create_pathway_figure(self.pathway, self.result, BASELINE)
        atf1 = next(t for t in fig.data if t.name == "ATF1")
        self.assertEqual(atf1.marker.line.color, "#ef4444")
        self.assertEqual(atf1.marker.line.width, 4)

    def test_degenerate_annotation(self):
        closed = dict(BASELINE, ATF1=0.0, EXPORT=0.0)
        fig = create_pathway_figure(self.pathway, solve(self.pathway, closed), closed)
        texts = [a.text for a in fig.layout.annotations]
        self.assertTrue(any("iamoh" in t for t in texts))


class TestSweepFigure(unittest.TestCase):
    def test_create_sweep_figure(self):
        wb = Workbench()
        frame = wb.sweep_accessibility("ATF1", values=[0.0, 0.5, 1.0])
        fig = create_sweep_figure(frame, gene="ATF1")
        self.assertIsNotNone(fig)
        self.assertEqual(len(fig.data), 3)

    def test_empty_sweep(self):
        import pandas as pd
        with self.assertRaises(ValueError):
            create_sweep_figure(pd.DataFrame())


if __name__ == '__main__':
    unittest.main()
