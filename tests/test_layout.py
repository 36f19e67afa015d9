import pytest
from atacflux.layout import compute_layout, edge_path, find_main_path, LayoutConfig, Point
from atacflux.pathway import get_ehrlich_pathway
from atacflux.presets import get_phenylethyl_acetate_pathway


@pytest.fixture
def layout():
    return compute_layout(get_ehrlich_pathway())


def test_main_path_stops_at_branch_point():
    assert find_main_path(get_ehrlich_pathway()) == ["leu", "kic", "mbal", "iamoh"]


def test_spine_positions(layout):
    expected_y = {"leu": 91, "kic": 221, "mbal": 351, "iamoh": 481}
    for node, y in expected_y.items():
        assert layout.positions[node].x == pytest.approx(350)
        assert layout.positions[node].y == pytest.approx(y)


def test_branch_positions(layout):
    assert layout.branch_y == pytest.approx(671)
    assert layout.branch_nodes == ["iamac", "waste"]
    assert layout.positions["iamac"].x == pytest.approx(595)
    assert layout.positions["waste"].x == pytest.approx(105)
    assert layout.positions["iamac"].y == pytest.approx(671)
    assert layout.positions["waste"].y == pytest.approx(671)


def test_view_box(layout):
    assert layout.view_box_width == 700
    assert layout.view_box_height == pytest.approx(763)


def test_enzyme_positions(layout):
    bat2 = layout.enzyme_positions["leu-kic"]
    assert bat2.gene == "BAT2"
    assert bat2.is_main_path
    assert (bat2.x, bat2.y) == (pytest.approx(350), pytest.approx(156))

    atf1 = layout.enzyme_positions["iamoh-iamac"]
    assert not atf1.is_main_path
    assert atf1.x == pytest.approx(472.5)
    assert atf1.y == pytest.approx(606)


def test_layout_is_topology_driven():
    layout = compute_layout(get_phenylethyl_acetate_pathway())
    assert layout.main_path == ["phe", "ppy", "paald", "peoh"]
    assert layout.positions["peac"].x == pytest.approx(595)


def test_custom_config():
    config = LayoutConfig(width=1000, node_gap=100)
    layout = compute_layout(get_ehrlich_pathway(), config)
    assert layout.positions["kic"].y - layout.positions["leu"].y == pytest.approx(100)
    assert layout.positions["leu"].x == pytest.approx(500)


def test_invalid_config():
    with pytest.raises(ValueError):
        LayoutConfig(main_column=1.5)
    with pytest.raises(ValueError):
        LayoutConfig(width=0)


def test_vertical_edge_path():
    geometry = edge_path(Point(350, 91), Point(350, 221), 42)
    assert geometry["type"] == "vertical"
    assert geometry["y1"] == pytest.approx(91 + 21 + 14)
    assert geometry["y2"] == pytest.approx(221 - 21 - 14)


def test_branch_edge_path():
    geometry = edge_path(Point(350, 481), Point(595, 671), 42)
    assert geometry["type"] == "branch"
    assert geometry["path"].startswith("M 350")
    assert geometry["points"][1] == (350, pytest.approx(481 + 190 * 0.4))
    assert (geometry["end_x"], geometry["end_y"]) == (595, 671)
