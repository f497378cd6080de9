import pytest

from bulwark.domain.models import ALL_UNITS, Role, SessionIdentity
from bulwark.exceptions import SelectionError
from bulwark.selector.cascade import CascadingUnitSelector


def _ids(units):
    return [u.id for u in units]


def test_drill_down_scenario(drill_tree):
    changes = []
    selector = CascadingUnitSelector(drill_tree, on_change=changes.append, root_id="hq", value="")

    levels = selector.levels()
    assert len(levels) == 1
    assert _ids(levels[0].options) == ["div-1", "div-3"]

    selector.select(0, "div-1")
    assert changes == ["div-1"]
    levels = selector.levels()
    assert len(levels) == 2
    assert _ids(levels[1].options) == ["bn-1-1", "bn-1-2"]

    selector.select(1, "bn-1-1")
    assert changes == ["div-1", "bn-1-1"]
    assert selector.visible_level_count == 2
    levels = selector.levels()
    assert len(levels) == 2
    assert [level.selected for level in levels] == ["div-1", "bn-1-1"]


def test_unrooted_selector_starts_at_top_level_units(drill_tree):
    selector = CascadingUnitSelector(drill_tree)
    assert _ids(selector.levels()[0].options) == ["hq"]
    selector.select(0, "hq")
    assert _ids(selector.levels()[1].options) == ["div-1", "div-3"]


def test_value_syncs_path_without_notifying(drill_tree):
    changes = []
    selector = CascadingUnitSelector(drill_tree, on_change=changes.append)
    selector.set_value("bn-1-2")
    assert selector.selections == ["hq", "div-1", "bn-1-2"]
    assert selector.value == "bn-1-2"
    assert changes == []

    selector.set_value("")
    assert selector.selections == []
    assert selector.visible_level_count == 1

    selector.set_value("ghost")
    assert selector.selections == []


def test_value_is_trimmed_below_root(drill_tree):
    selector = CascadingUnitSelector(drill_tree, root_id="hq", value="bn-1-2")
    assert selector.selections == ["div-1", "bn-1-2"]
    selector.set_value("hq")
    assert selector.selections == []


def test_selecting_higher_level_truncates_deeper_picks(drill_tree):
    changes = []
    selector = CascadingUnitSelector(drill_tree, on_change=changes.append, root_id="hq", value="bn-1-1")
    selector.select(0, "div-3")
    assert selector.selections == ["div-3"]
    assert changes == ["div-3"]
    # div-3 has no children: no extra level is offered.
    assert selector.visible_level_count == 1
    assert len(selector.levels()) == 1


def test_clear(drill_tree):
    changes = []
    selector = CascadingUnitSelector(drill_tree, on_change=changes.append, value="bn-1-1")
    selector.clear(2)
    assert selector.selections == ["hq", "div-1"]
    assert changes == ["div-1"]

    selector.clear(0)
    assert selector.selections == []
    assert changes == ["div-1", ""]


def test_invalid_selections_raise(drill_tree):
    selector = CascadingUnitSelector(drill_tree, root_id="hq")
    with pytest.raises(SelectionError):
        selector.select(1, "bn-1-1")
    with pytest.raises(SelectionError):
        selector.select(0, "bn-1-1")
    with pytest.raises(SelectionError):
        selector.select(-1, "div-1")
    with pytest.raises(SelectionError):
        selector.clear(-1)


def test_display_path(drill_tree):
    selector = CascadingUnitSelector(drill_tree, value="bn-1-2")
    assert selector.display_path() == "HQ > 1st Division > 2nd Battalion"
    assert CascadingUnitSelector(drill_tree).display_path() == ""


def test_options_for_levels_out_of_range(drill_tree):
    selector = CascadingUnitSelector(drill_tree)
    assert selector.options_for(-1) == []
    assert selector.options_for(3) == []


def test_scoped_selector_for_div(resolver):
    session = SessionIdentity(role=Role.DIV, home_unit_id="div-1")
    selector = CascadingUnitSelector.for_scope(resolver, session)
    assert selector.is_fixed is False
    assert _ids(selector.levels()[0].options) == ["div-1"]
    selector.select(0, "div-1")
    assert _ids(selector.levels()[1].options) == ["reg-11"]
    # Siblings of the home unit are never offered.
    with pytest.raises(SelectionError):
        selector.select(0, "div-3")


def test_scoped_selector_for_bn_is_fixed(resolver):
    changes = []
    session = SessionIdentity(role=Role.BN, home_unit_id="bn-1-1")
    selector = CascadingUnitSelector.for_scope(resolver, session, on_change=changes.append)
    assert selector.is_fixed is True
    assert selector.value == "bn-1-1"
    assert len(selector.levels()) == 1
    with pytest.raises(SelectionError):
        selector.select(0, "bn-1-1")
    with pytest.raises(SelectionError):
        selector.clear(0)
    assert changes == []


def test_scoped_selector_for_hq_sees_whole_tree(resolver):
    selector = CascadingUnitSelector.for_scope(resolver, SessionIdentity(role="ROLE_HQ", home_unit_id="hq"), value="bn-1-2")
    assert selector.selections == ["hq", "goc", "corps-1", "div-1", "reg-11", "bn-1-2"]
    assert selector.visible_level_count == 6


def test_all_units_at_first_level(drill_tree):
    changes = []
    selector = CascadingUnitSelector(drill_tree, on_change=changes.append, root_id="hq", value="bn-1-1")
    assert selector.levels()[0].allows_all is True

    selector.select(0, ALL_UNITS)
    assert changes == [ALL_UNITS]
    assert selector.value == ALL_UNITS
    assert selector.all_selected is True
    assert selector.visible_level_count == 1
    assert len(selector.levels()) == 1
    assert selector.options_for(1) == []
    assert selector.display_path() == "All units"
    # Nothing can be drilled into below "all units".
    with pytest.raises(SelectionError):
        selector.select(1, "bn-1-1")

    selector.select(0, "div-1")
    assert selector.selections == ["div-1"]
    assert changes == [ALL_UNITS, "div-1"]


def test_all_units_value_round_trips(drill_tree):
    selector = CascadingUnitSelector(drill_tree, value=ALL_UNITS)
    assert selector.selections == [ALL_UNITS]
    assert selector.all_selected is True


def test_all_units_only_offered_at_first_level(drill_tree):
    selector = CascadingUnitSelector(drill_tree, value="hq")
    with pytest.raises(SelectionError):
        selector.select(1, ALL_UNITS)
    assert [level.allows_all for level in selector.levels()] == [True, False]


def test_fixed_selector_never_offers_all_units(resolver):
    session = SessionIdentity(role=Role.BN, home_unit_id="bn-1-1")
    selector = CascadingUnitSelector.for_scope(resolver, session, value=ALL_UNITS)
    assert selector.selections == []
    assert selector.levels()[0].allows_all is False
    with pytest.raises(SelectionError):
        selector.select(0, ALL_UNITS)
