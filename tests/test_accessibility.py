import pytest
from atacflux.accessibility import AccessibilityTables, Intervention, resolve_accessibility, resolve_profile
from atacflux.core.exceptions import ConfigurationError
from atacflux.pathway import Pathway, get_ehrlich_pathway
from atacflux.presets import get_ehrlich_tables, get_phenylethyl_acetate_tables


@pytest.fixture
def tables():
    return get_ehrlich_tables()


def test_intervention_parse():
    assert Intervention.parse("activate") == Intervention.ACTIVATE
    assert Intervention.parse(" Repress ") == Intervention.REPRESS
    assert Intervention.parse(Intervention.NORMAL) == Intervention.NORMAL
    with pytest.raises(ConfigurationError):
        Intervention.parse("overexpress")


def test_boolean_interventions_are_a_subset():
    assert Intervention.parse(True) == Intervention.ACTIVATE
    assert Intervention.parse(False) == Intervention.NORMAL


def test_intervention_cycle():
    assert Intervention.NORMAL.next() == Intervention.ACTIVATE
    assert Intervention.ACTIVATE.next() == Intervention.REPRESS
    assert Intervention.REPRESS.next() == Intervention.NORMAL


def test_resolve_accessibility(tables):
    assert resolve_accessibility("ATF1", "normal", tables) == 0.06
    assert resolve_accessibility("ATF1", Intervention.ACTIVATE, tables) == 0.70
    assert resolve_accessibility("ATF1", "repress", tables) == 0.02
    assert resolve_accessibility("ATF1", None, tables) == 0.06
    assert resolve_accessibility("BAT2", True, tables) == 0.88


def test_passive_gene_ignores_state(tables):
    for state in ("normal", "activate", "repress"):
        assert resolve_accessibility("EXPORT", state, tables) == 0.30


def test_unknown_gene_is_configuration_error(tables):
    with pytest.raises(ConfigurationError):
        resolve_accessibility("ATF2", "normal", tables)


@pytest.mark.parametrize("preset_tables", [get_ehrlich_tables(), get_phenylethyl_acetate_tables()])
def test_preset_ordering_invariant(preset_tables):
    for gene in preset_tables.genes:
        assert preset_tables.repressed[gene] <= preset_tables.baseline[gene] <= preset_tables.activated[gene]


def test_ordering_violation_rejected():
    with pytest.raises(ConfigurationError):
        AccessibilityTables(
            baseline={"G": 0.5},
            activated={"G": 0.4},
            repressed={"G": 0.1},
        )
    with pytest.raises(ConfigurationError):
        AccessibilityTables(
            baseline={"G": 0.5},
            activated={"G": 0.9},
            repressed={"G": 0.6},
        )


def test_out_of_range_rejected():
    with pytest.raises(ConfigurationError):
        AccessibilityTables(baseline={"G": 1.2}, activated={"G": 1.5}, repressed={"G": 0.1})


def test_mismatched_gene_sets_rejected():
    with pytest.raises(ConfigurationError):
        AccessibilityTables(baseline={"G": 0.5, "H": 0.5}, activated={"G": 0.9}, repressed={"G": 0.1})


def test_passive_gene_must_be_constant():
    with pytest.raises(ConfigurationError):
        AccessibilityTables(
            baseline={"EXPORT": 0.3},
            activated={"EXPORT": 0.5},
            repressed={"EXPORT": 0.3},
            passive_genes=frozenset({"EXPORT"}),
        )


def test_tables_round_trip(tables):
    rebuilt = AccessibilityTables.from_dict(tables.to_dict())
    assert rebuilt == tables


def test_resolve_profile(tables):
    pathway = get_ehrlich_pathway()
    profile = resolve_profile(pathway, {"ATF1": "activate", "BAT2": "repress"}, tables)
    assert profile == {"BAT2": 0.30, "ARO10": 0.72, "ADH6": 0.68, "ATF1": 0.70, "EXPORT": 0.30}


def test_resolve_profile_requires_coverage():
    pathway = get_ehrlich_pathway()
    partial = AccessibilityTables(
        baseline={"BAT2": 0.5}, activated={"BAT2": 0.8}, repressed={"BAT2": 0.2}
    )
    with pytest.raises(ConfigurationError):
        resolve_profile(pathway, {}, partial)


def _pump_pathway(pump_passive=True):
    return Pathway.from_dict({
        "name": "pump",
        "metabolites": {
            "sub": {"name": "Substrate", "type": "input"},
            "alc": {"name": "Alcohol", "type": "branch"},
            "est": {"name": "Ester", "type": "product"},
            "out": {"name": "Secreted", "type": "waste"},
        },
        "genes": {
            "ADH1": {"name": "alcohol dehydrogenase"},
            "AAT1": {"name": "alcohol acetyltransferase"},
            "PUMP": {"name": "export", "passive": pump_passive},
        },
        "edges": [
            {"from": "sub", "to": "alc", "gene": "ADH1"},
            {"from": "alc", "to": "est", "gene": "AAT1"},
            {"from": "alc", "to": "out", "gene": "PUMP"},
        ],
    })


def _pump_tables(passive):
    pump_activated = 0.3 if passive else 0.9
    return AccessibilityTables(
        baseline={"ADH1": 0.8, "AAT1": 0.2, "PUMP": 0.3},
        activated={"ADH1": 0.9, "AAT1": 0.8, "PUMP": pump_activated},
        repressed={"ADH1": 0.3, "AAT1": 0.1, "PUMP": 0.3},
        passive_genes=frozenset({"PUMP"}) if passive else frozenset(),
    )


def test_passive_status_must_agree_with_pathway():
    # pathway says passive, tables do not
    with pytest.raises(ConfigurationError):
        _pump_tables(passive=False).check_covers(_pump_pathway(pump_passive=True))
    with pytest.raises(ConfigurationError):
        resolve_profile(_pump_pathway(pump_passive=True), {"PUMP": "activate"}, _pump_tables(passive=False))
    # tables say passive, pathway does not
    with pytest.raises(ConfigurationError):
        _pump_tables(passive=True).check_covers(_pump_pathway(pump_passive=False))


def test_agreeing_passive_gene_resolves_to_baseline():
    profile = resolve_profile(_pump_pathway(), {"PUMP": "activate", "AAT1": "activate"}, _pump_tables(passive=True))
    assert profile["PUMP"] == 0.3
    assert profile["AAT1"] == 0.8


def test_tables_copy_caller_dicts():
    baseline = {"G": 0.5}
    activated = {"G": 0.9}
    tables = AccessibilityTables(baseline=baseline, activated=activated, repressed={"G": 0.1})
    baseline["G"] = 0.99
    activated["G"] = 0.0
    assert tables.baseline["G"] == 0.5
    assert tables.activated["G"] == 0.9
