import unittest
from atacflux.metrics import capture_rate, fold_change, bottleneck_gene, waste_ratio, derive_metrics, PathwayMetrics
from atacflux.pathway import get_ehrlich_pathway
from atacflux.solver import FluxResult, solve

BASELINE = {"BAT2": 0.65, "ARO10": 0.72, "ADH6": 0.68, "ATF1": 0.06, "EXPORT": 0.30}
GENES = ["BAT2", "ARO10", "ADH6", "ATF1"]


class TestMetrics(unittest.TestCase):
    def setUp(self):
        self.pathway = get_ehrlich_pathway()
        self.baseline = solve(self.pathway, BASELINE)
        self.activated = solve(self.pathway, dict(BASELINE, ATF1=0.70))

    def test_baseline_capture_rate(self):
        self.assertAlmostEqual(capture_rate(self.baseline, "iamac", "waste"), 1 / 6)
        self.assertAlmostEqual(waste_ratio(self.baseline, "iamac", "waste"), 5 / 6)

    def test_activated_capture_and_fold(self):
        self.assertAlmostEqual(capture_rate(self.activated, "iamac", "waste"), 0.70)
        self.assertAlmostEqual(fold_change(self.activated, self.baseline, "iamac"), 4.2)

    def test_fold_change_of_baseline_is_one(self):
        self.assertAlmostEqual(fold_change(self.baseline, self.baseline, "iamac"), 1.0)

    def test_capture_rate_undefined(self):
        empty = FluxResult(node_flux={"iamac": 0.0, "waste": 0.0}, edge_flux={})
        self.assertIsNone(capture_rate(empty, "iamac", "waste"))
        self.assertIsNone(waste_ratio(empty, "iamac", "waste"))

    def test_fold_change_undefined(self):
        zero = solve(self.pathway, dict(BASELINE, BAT2=0.0))
        self.assertIsNone(fold_change(self.activated, zero, "iamac"))

    def test_bottleneck(self):
        self.assertEqual(bottleneck_gene(BASELINE, GENES), "ATF1")
        self.assertEqual(bottleneck_gene(dict(BASELINE, ATF1=0.70), GENES), "BAT2")
        self.assertIsNone(bottleneck_gene(BASELINE, []))

    def test_bottleneck_tie_break_first_wins(self):
        tied = {"BAT2": 0.3, "ARO10": 0.3, "ADH6": 0.3, "ATF1": 0.3}
        self.assertEqual(bottleneck_gene(tied, GENES), "BAT2")
        self.assertEqual(bottleneck_gene(tied, ["ATF1", "BAT2"]), "ATF1")

    def test_bottleneck_ignores_passive_gene(self):
        accessibility = dict(BASELINE, ATF1=0.9, EXPORT=0.01)
        self.assertEqual(bottleneck_gene(accessibility, self.pathway.controllable_genes), "BAT2")


class TestDeriveMetrics(unittest.TestCase):
    def setUp(self):
        self.pathway = get_ehrlich_pathway()
        self.baseline = solve(self.pathway, BASELINE)

    def test_derive(self):
        accessibility = dict(BASELINE, ATF1=0.70)
        current = solve(self.pathway, accessibility)
        metrics = derive_metrics(current, self.baseline, self.pathway, accessibility)
        self.assertAlmostEqual(metrics.capture_rate, 0.70)
        self.assertAlmostEqual(metrics.fold_change, 4.2)
        self.assertEqual(metrics.bottleneck_gene, "BAT2")
        self.assertAlmostEqual(metrics.waste_ratio, 0.30)
        self.assertAlmostEqual(metrics.product_flux, 0.222768)
        self.assertEqual(metrics.format_percent(), "70.0%")
        self.assertEqual(metrics.format_fold(), "4.2×")

    def test_undefined_formats_as_not_applicable(self):
        metrics = PathwayMetrics(
            capture_rate=None, fold_change=None, bottleneck_gene="ATF1",
            waste_ratio=None, product_flux=0.0, waste_flux=0.0,
        )
        self.assertEqual(metrics.format_percent(), "n/a")
        self.assertEqual(metrics.format_fold(), "n/a")
        self.assertIsNone(metrics.to_dict()["capture_rate"])

    def test_closed_upstream_reports_undefined(self):
        accessibility = dict(BASELINE, BAT2=0.0)
        current = solve(self.pathway, accessibility)
        metrics = derive_metrics(current, self.baseline, self.pathway, accessibility)
        self.assertIsNone(metrics.capture_rate)
        self.assertEqual(metrics.fold_change, 0.0)
        self.assertEqual(metrics.bottleneck_gene, "BAT2")


if __name__ == '__main__':
    unittest.main()
