import logging
import math

import numpy as np
import pytest

from idisc import discretize, fit_mdlp
from idisc.discretization.block_range import RangeAccumulator
from idisc.discretization.blocks import aggregate_blocks
from idisc.discretization.categorizer import format_bound, parse_bound
from idisc.discretization.mdlp import (build_partition_tree, find_best_split, materialize_categorizer,
                                       mdlpc_criterion, _cut_point, _midpoint)
from idisc.util.errors import InsufficientDataError, InvalidSampleError, ShapeMismatchError


def three_segments():
    values = np.arange(60, dtype=float)
    labels = np.array(['A'] * 20 + ['B'] * 20 + ['A'] * 20)
    return values, labels


def test_split_search_scans_all_cuts():
    blocks = aggregate_blocks([1, 2, 3, 4, 5], [0, 0, 0, 1, 1])
    accumulator = RangeAccumulator(blocks)
    split = find_best_split(accumulator.full_range(), accumulator)
    assert split.cut_index == 2
    assert split.entropy == 0
    assert (split.left.first_index, split.left.last_index) == (0, 2)
    assert (split.right.first_index, split.right.last_index) == (3, 4)


def test_split_search_includes_last_cut():
    blocks = aggregate_blocks([1, 2, 3], [0, 0, 1])
    accumulator = RangeAccumulator(blocks)
    assert find_best_split(accumulator.full_range(), accumulator).cut_index == 1


def test_split_search_lowest_index_wins_ties():
    # cutting after the first or before the last block gives the same entropy
    blocks = aggregate_blocks([1, 2, 3, 4], [0, 1, 1, 0])
    accumulator = RangeAccumulator(blocks)
    split = find_best_split(accumulator.full_range(), accumulator)
    assert split.cut_index == 0


def test_split_search_single_block():
    blocks = aggregate_blocks([1, 1, 1, 1], [0, 1, 0, 1])
    accumulator = RangeAccumulator(blocks)
    assert find_best_split(accumulator.full_range(), accumulator) is None


def test_mdlpc_criterion():
    blocks = aggregate_blocks([1, 2, 3, 4, 5], [0, 0, 0, 1, 1])
    accumulator = RangeAccumulator(blocks)
    parent = accumulator.full_range()
    assert mdlpc_criterion(parent, find_best_split(parent, accumulator))

    blocks = aggregate_blocks([1, 2, 3, 4], [0, 1, 1, 0])
    accumulator = RangeAccumulator(blocks)
    parent = accumulator.full_range()
    assert not mdlpc_criterion(parent, find_best_split(parent, accumulator))


def test_mdlpc_criterion_rejects_pure_ranges():
    blocks = aggregate_blocks([1, 2, 3], [0, 0, 0])
    accumulator = RangeAccumulator(blocks)
    parent = accumulator.full_range()
    assert not mdlpc_criterion(parent, find_best_split(parent, accumulator))


def test_mdlpc_criterion_needs_two_instances():
    blocks = aggregate_blocks([1, 2], [0, 1])
    accumulator = RangeAccumulator(blocks)
    split = find_best_split(accumulator.full_range(), accumulator)
    with pytest.raises(ValueError):
        mdlpc_criterion(accumulator.range(0, 0), split)


def test_tree_three_segments():
    values, labels = three_segments()
    result = fit_mdlp(values, labels)
    tree = result.tree

    assert not tree.is_terminal
    assert tree.split.cut_index == 19  # ties with the cut after block 39
    assert tree.left.is_terminal
    assert tree.right.split.cut_index == 39
    assert tree.n_leaves == 3
    assert [leaf.depth for leaf in tree.leaves()] == [1, 2, 2]
    assert result.categorizer.labels == [']-Inf, 19.5]', ']19.5, 39.5]', ']39.5, Inf[']
    assert result.classes.tolist() == ['A', 'B']


def test_tree_max_depth():
    values, labels = three_segments()
    assert discretize(values, labels, max_depth=1).labels == [']-Inf, 19.5]', ']19.5, Inf[']
    assert discretize(values, labels, max_depth=0).labels == [']-Inf, Inf[']


def test_materialize_uses_block_values():
    blocks = aggregate_blocks([1, 2, 3, 4, 5], [0, 0, 0, 1, 1], merge_pure=True)
    tree = build_partition_tree(blocks)
    categorizer = materialize_categorizer(blocks, tree.leaves())
    assert categorizer.labels == [']-Inf, 3.5]', ']3.5, Inf[']


def test_midpoint_does_not_overflow():
    assert _midpoint(1.5e308, 1.7e308) == pytest.approx(1.6e308)
    assert _midpoint(3.0, 4.0) == 3.5


def test_build_without_blocks():
    with pytest.raises(InsufficientDataError):
        build_partition_tree([])


def test_split_is_logged(caplog):
    values, labels = three_segments()
    with caplog.at_level(logging.DEBUG, logger='idisc.discretization.mdlp'):
        discretize(values, labels)
    assert 'accepted split' in caplog.text


# example scenarios

def test_two_intervals():
    categorizer = discretize([1, 2, 3, 4, 5], ['A', 'A', 'A', 'B', 'B'])
    assert categorizer.labels == [']-Inf, 3.5]', ']3.5, Inf[']
    assert categorizer(3) == ']-Inf, 3.5]'
    assert categorizer(4) == ']3.5, Inf['


def test_single_mixed_block():
    categorizer = discretize([1, 1, 1, 1], ['A', 'B', 'A', 'B'])
    assert categorizer.labels == [']-Inf, Inf[']


def test_pure_sample():
    categorizer = discretize([1, 2, 3], ['A', 'A', 'A'])
    assert categorizer.labels == [']-Inf, Inf[']
    categorizer = discretize([-1e6, 0, 1e6], ['A', 'A', 'A'])
    assert categorizer.labels == [']-Inf, Inf[']


def test_empty_sample():
    with pytest.raises(InsufficientDataError):
        discretize([], [])


def test_invalid_samples():
    with pytest.raises(InvalidSampleError):
        discretize([1, np.nan, 3], ['A', 'B', 'A'])
    with pytest.raises(InvalidSampleError):
        discretize([1, np.inf, 3], ['A', 'B', 'A'])
    with pytest.raises(ShapeMismatchError):
        discretize([1, 2, 3], ['A', 'B'])
    with pytest.raises(ValueError):  # all conditions are ValueErrors
        discretize([], [])


# properties

def random_samples():
    rng = np.random.RandomState(13)
    for n_classes in [2, 3, 4]:
        x = np.round(rng.randn(300) * 10, 1)
        y = np.digitize(x + rng.randn(300) * 4, np.linspace(-15, 15, n_classes - 1))
        yield x, y


def test_exhaustive_and_disjoint():
    for x, y in random_samples():
        categorizer = discretize(x, y)
        assert len(categorizer) > 1
        probes = np.r_[x, -1.7e308, 1.7e308, categorizer.cut_points]
        for value in probes:
            assert sum(category.contains(value) for category in categorizer) == 1


def test_intervals_are_ordered_and_contiguous():
    for x, y in random_samples():
        categories = list(discretize(x, y))
        assert categories[0].lower_bound == -math.inf
        assert categories[-1].upper_bound == math.inf
        for previous, current in zip(categories[:-1], categories[1:]):
            assert previous.lower_bound < current.lower_bound
            assert previous.upper_bound == current.lower_bound


def test_deterministic_under_permutation():
    rng = np.random.RandomState(0)
    for x, y in random_samples():
        expected = discretize(x, y)
        for _ in range(3):
            order = rng.permutation(x.shape[0])
            assert discretize(x[order], y[order]) == expected


def test_accepted_splits_reduce_entropy():
    for x, y in random_samples():
        stack = [fit_mdlp(x, y).tree]
        while stack:
            node = stack.pop()
            if node.is_terminal:
                continue
            assert node.block_range.observed_class_count > 1
            assert node.split.entropy <= node.block_range.entropy
            stack.extend([node.left, node.right])


def test_pure_ranges_are_terminal():
    for x, y in random_samples():
        stack = [fit_mdlp(x, y).tree]
        while stack:
            node = stack.pop()
            if node.block_range.is_pure:
                assert node.is_terminal
            if not node.is_terminal:
                stack.extend([node.left, node.right])


def test_bounds_round_trip():
    for x, y in random_samples():
        for category in discretize(x, y):
            for bound in (category.lower_bound, category.upper_bound):
                text = format_bound(bound)
                assert format_bound(parse_bound(text)) == text
                assert parse_bound(text) == bound


def test_merge_pure_gives_same_intervals():
    values, labels = three_segments()
    assert discretize(values, labels, merge_pure=True) == discretize(values, labels)
    result = fit_mdlp(values, labels, merge_pure=True)
    assert len(result.blocks) == 3
    assert result.tree.split.cut_index == 0


# values one ulp apart

def adjacent_doubles(n):
    values = [1 + 2 ** -52]
    for _ in range(n - 1):
        values.append(float(np.nextafter(values[-1], 2)))
    return values


def test_cut_point_stays_below_right_value():
    a, b = adjacent_doubles(2)
    assert _midpoint(a, b) == b  # ties to even rounds up here
    assert _cut_point(a, b) == a
    assert _cut_point(3.0, 4.0) == 3.5
    assert _cut_point(1.5e308, 1.7e308) < 1.7e308


def test_adjacent_values_keep_their_interval():
    a, b = adjacent_doubles(2)
    categorizer = discretize([a] * 20 + [b] * 20, ['A'] * 20 + ['B'] * 20)
    assert categorizer.labels == [']-Inf, {}]'.format(format_bound(a)), ']{}, Inf['.format(format_bound(a))]
    assert categorizer.code(a) == 0
    assert categorizer.code(b) == 1


def test_single_block_between_adjacent_values():
    a, b, c = adjacent_doubles(3)
    categorizer = discretize([a] * 20 + [b] * 20 + [c] * 20, ['A'] * 20 + ['B'] * 20 + ['A'] * 20)
    assert len(categorizer) == 3
    assert [categorizer.code(v) for v in (a, b, c)] == [0, 1, 2]
    for category in categorizer:
        assert category.lower_bound < category.upper_bound


def assert_training_values_in_own_leaf(values, labels, merge_pure=False):
    result = fit_mdlp(values, labels, merge_pure=merge_pure)
    for index, leaf in enumerate(result.tree.leaves()):
        r = leaf.block_range
        for block in result.blocks[r.first_index:r.last_index + 1]:
            assert result.categorizer.code(block.first_value) == index
            assert result.categorizer.code(block.last_value) == index


def test_training_values_fall_in_their_leaf():
    for x, y in random_samples():
        assert_training_values_in_own_leaf(x, y)
        assert_training_values_in_own_leaf(x, y, merge_pure=True)

    values = adjacent_doubles(6)
    x = np.repeat(values, 15)
    y = np.repeat(['A', 'B', 'A', 'B', 'B', 'A'], 15)
    assert_training_values_in_own_leaf(x, y)
    assert_training_values_in_own_leaf(x, y, merge_pure=True)
