import pytest

from nearest_toilet import any_facility, haversine_m, rank, rank_with_distances, requires_baby_change
from toilet_data import Facility

from conftest import REFERENCE, toilet_north_of


@pytest.fixture
def four_toilets():
    return [
        toilet_north_of(REFERENCE, 500, "500m"),
        toilet_north_of(REFERENCE, 10, "10m"),
        toilet_north_of(REFERENCE, 2000, "2000m"),
        toilet_north_of(REFERENCE, 50, "50m"),
    ]


def _baby_change(value):
    return Facility("t", 0.0, 0.0, "", "", value)


@pytest.mark.parametrize("value", ["Yes", "YES", "yes", "yEs"])
def test_baby_change_predicate_keeps_yes(value):
    assert requires_baby_change(_baby_change(value))


@pytest.mark.parametrize("value", ["No", "no", "", "Y", " yes"])
def test_baby_change_predicate_drops_everything_else(value):
    assert not requires_baby_change(_baby_change(value))


def test_rank_filters_with_predicate():
    toilets = [
        toilet_north_of(REFERENCE, 10, "no", baby_change="No"),
        toilet_north_of(REFERENCE, 20, "yes", baby_change="Yes"),
        toilet_north_of(REFERENCE, 30, "blank", baby_change=""),
        toilet_north_of(REFERENCE, 40, "shouty", baby_change="YES"),
    ]

    assert [t.name for t in rank(toilets, requires_baby_change, REFERENCE)] == ["yes", "shouty"]
    assert len(rank(toilets, any_facility, REFERENCE)) == 4


def test_rank_returns_k_nearest_in_order(four_toilets):
    nearest = rank(four_toilets, any_facility, REFERENCE, k=2)

    assert [t.name for t in nearest] == ["10m", "50m"]


def test_rank_returns_everything_when_fewer_than_k(four_toilets):
    nearest = rank(four_toilets, any_facility, REFERENCE, k=10)

    assert [t.name for t in nearest] == ["10m", "50m", "500m", "2000m"]


def test_rank_defaults_to_ten():
    toilets = [toilet_north_of(REFERENCE, 100 * i, str(i)) for i in range(15)]

    assert len(rank(toilets, any_facility, REFERENCE)) == 10


def test_rank_with_distances_reports_meters(four_toilets):
    pairs = rank_with_distances(four_toilets, any_facility, REFERENCE, k=4)

    assert [round(d) for _, d in pairs] == [10, 50, 500, 2000]


def test_equal_distances_keep_input_order():
    toilets = [toilet_north_of(REFERENCE, 100, name) for name in ("a", "b", "c")]
    toilets.insert(1, toilet_north_of(REFERENCE, 5, "closest"))

    assert [t.name for t in rank(toilets, any_facility, REFERENCE)] == ["closest", "a", "b", "c"]


def test_rank_is_deterministic(four_toilets):
    first = rank(four_toilets, any_facility, REFERENCE, k=3)
    second = rank(four_toilets, any_facility, REFERENCE, k=3)

    assert first == second


def test_rank_does_not_modify_input(four_toilets):
    before = list(four_toilets)
    rank(four_toilets, any_facility, REFERENCE)

    assert four_toilets == before


@pytest.mark.parametrize("k", [0, 1, 10])
def test_empty_input_gives_empty_output(k):
    assert rank([], requires_baby_change, REFERENCE, k=k) == []


def test_k_zero_gives_empty_output(four_toilets):
    assert rank(four_toilets, any_facility, REFERENCE, k=0) == []


def test_negative_k_is_rejected(four_toilets):
    with pytest.raises(ValueError):
        rank(four_toilets, any_facility, REFERENCE, k=-1)


@pytest.mark.parametrize("reference", [(90.0, 0.0), (-90.0, 45.0), (0.0, 180.0), (10.0, -180.0)])
def test_poles_and_antimeridian_are_handled(reference):
    toilets = [
        Facility("east", 0.0, 179.9, "", "", "Yes"),
        Facility("west", 0.0, -179.9, "", "", "Yes"),
        Facility("south", -90.0, 0.0, "", "", "Yes"),
    ]

    pairs = rank_with_distances(toilets, any_facility, reference)

    assert len(pairs) == 3
    assert all(d == d and d >= 0 for _, d in pairs)


def test_haversine_across_antimeridian_is_short():
    assert haversine_m(0.0, 179.9, 0.0, -179.9) == pytest.approx(22239, rel=1e-3)


def test_haversine_antipodes():
    assert haversine_m(0.0, 0.0, 0.0, 180.0) == pytest.approx(20015114, rel=1e-4)
