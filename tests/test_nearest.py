import math

from climate_story.data import Sample
from climate_story.nearest import nearest_index, nearest_sample


def test_nearest_picks_closest_year(years):
    assert nearest_sample(years, 2007).year == 2005
    assert nearest_index(years, 2007) == 1


def test_exact_match_returns_that_sample(years):
    for i, s in enumerate(years):
        assert nearest_index(years, s.year) == i


def test_tie_resolves_to_first_encountered():
    samples = [Sample(2000), Sample(2002)]
    assert nearest_index(samples, 2001) == 0
    assert nearest_index(list(reversed(samples)), 2001) == 0


def test_empty_input_returns_none():
    assert nearest_index([], 2000) is None
    assert nearest_sample([], 2000) is None


def test_unsorted_input():
    samples = [Sample(2010), Sample(1990), Sample(2001)]
    assert nearest_sample(samples, 1999).year == 2001
    assert nearest_sample(samples, 1900).year == 1990


def test_custom_key_and_nan_keys_are_skipped():
    samples = [Sample(2000, {"co2": math.nan}), Sample(2001, {"co2": 350.0}), Sample(2002, {"co2": 360.0})]
    assert nearest_sample(samples, 349, key=lambda s: s["co2"]).year == 2001
