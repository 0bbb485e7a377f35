"""Tests for kernel/similarity.py."""

import copy

import pytest

from lindiff.codes import TotalPolicy
from lindiff.kernel.similarity import (
    compare_objects,
    count_matches,
    count_properties,
    round_half_up,
)


def test_identical_documents_score_100():
    document = {"a": 1, "b": [1, 2, {"c": None}], "d": {"e": "x"}}
    result = compare_objects(document, copy.deepcopy(document))

    assert result.total_properties == 5
    assert result.matching_properties == result.total_properties
    assert result.similarity_percentage == 100.0


def test_empty_documents_score_100():
    result = compare_objects({}, {})
    assert result.total_properties == 0
    assert result.matching_properties == 0
    assert result.similarity_percentage == 100.0


def test_scalar_roots():
    assert compare_objects(5, 5).similarity_percentage == 100.0
    different = compare_objects(5, 6)
    assert different.total_properties == 1
    assert different.matching_properties == 0
    assert different.similarity_percentage == 0.0


def test_key_order_does_not_matter():
    result = compare_objects({"a": 1, "b": 2}, {"b": 2, "a": 1})
    assert result.similarity_percentage == 100.0


def test_array_order_matters():
    result = compare_objects([1, 2, 3], [3, 2, 1])
    assert result.total_properties == 3
    assert result.matching_properties == 1
    assert result.similarity_percentage == 33.33


def test_one_sided_keys_contribute_nothing_to_matches():
    result = compare_objects({"a": 1, "b": 2}, {"a": 1, "z": 9})
    assert result.total_properties == 2
    assert result.matching_properties == 1
    assert result.similarity_percentage == 50.0


def test_extra_array_elements_contribute_nothing():
    assert count_matches([1, 2], [1, 2, 3, 4]) == 2
    assert count_matches([1, 2, 3, 4], [1, 2]) == 2


def test_type_mismatch_counts_zero():
    assert count_matches({"a": 1}, [1]) == 0
    assert count_matches([{"a": 1}], [[1]]) == 0
    assert count_matches({"a": 1}, 1) == 0
    assert count_matches(1, True) == 0


def test_ignored_properties_excluded_from_both_counts():
    left = {"id": 1, "name": "x", "child": {"id": 2, "v": 1}}
    right = {"id": 9, "name": "x", "child": {"id": 8, "v": 1}}

    result = compare_objects(left, right, ["id"])
    assert result.total_properties == 2
    assert result.matching_properties == 2
    assert result.similarity_percentage == 100.0

    unfiltered = compare_objects(left, right)
    assert unfiltered.total_properties == 4
    assert unfiltered.matching_properties == 2


def test_aliased_substructures_are_counted_once():
    shared = {"x": 1, "y": 2}
    aliased = {"p": shared, "q": shared}
    distinct = {"p": {"x": 1, "y": 2}, "q": {"x": 1, "y": 2}}

    assert count_properties(aliased) == 2
    assert count_properties(distinct) == 4
    assert count_matches(aliased, distinct) == 2
    assert count_matches(distinct, aliased) == 4


def test_visited_state_does_not_leak_between_calls():
    shared = [1, 2]
    document = {"a": shared}
    assert count_properties(document) == 2
    assert count_properties(document) == 2
    first = compare_objects(document, document)
    second = compare_objects(document, document)
    assert first == second


def test_explicit_visited_set_is_honoured():
    shared = [1, 2]
    counted = set()
    assert count_properties(shared, counted=counted) == 2
    assert count_properties({"again": shared}, counted=counted) == 0


def test_total_policy_max():
    left = {"a": 1}
    right = {"a": 1, "b": 2, "c": 3}

    assert compare_objects(left, right, total_policy=TotalPolicy.LEFT).similarity_percentage == 100.0

    result = compare_objects(left, right, total_policy=TotalPolicy.MAX)
    assert result.total_properties == 3
    assert result.matching_properties == 1
    assert result.similarity_percentage == 33.33


def test_similarity_is_not_symmetric_under_left_policy():
    small = {"a": 1}
    large = {"a": 1, "b": 2}
    assert compare_objects(small, large).similarity_percentage == 100.0
    assert compare_objects(large, small).similarity_percentage == 50.0


@pytest.mark.parametrize(
    "value,expected",
    [
        (66.66666666666667, 66.67),
        (0.125, 0.13),
        (2.675, 2.68),
        (12.344, 12.34),
        (100.0, 100.0),
    ],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_two_thirds_rounds_to_two_decimals():
    result = compare_objects([1, 2, 3], [1, 2, 4])
    assert result.similarity_percentage == 66.67


def test_inputs_are_not_mutated():
    left = {"a": [1, {"b": 2}], "id": 1}
    right = {"a": [1, {"b": 3}], "id": 2}
    left_before = copy.deepcopy(left)
    right_before = copy.deepcopy(right)

    compare_objects(left, right, ["id"], TotalPolicy.MAX)

    assert left == left_before
    assert right == right_before


def test_bare_string_ignore_is_one_key():
    result = compare_objects({"id": 1, "i": 1, "d": 1}, {"id": 9, "i": 1, "d": 1}, "id")
    assert result.total_properties == 2
    assert result.similarity_percentage == 100.0
