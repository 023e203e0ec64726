'''
# Discretization MDLP
Supervised discretization of a continuous attribute by recursive entropy minimization,
with Fayyad and Irani's MDLP stopping criterion.

The sample is collapsed into blocks of equal values, the range of all blocks is split
in two at the cut point minimizing the class information entropy, and the split is
kept only if its information gain pays for the extra description length. Accepted
halves are split again until no split is accepted; the leaves become labeled intervals.

**Reference:**
Fayyad, Usama M., and Keki B. Irani. "Multi-interval discretization of continuous-valued attributes for
classification learning." (1993).

Elomaa, Tapio, and Juho Rousu. "Efficient multisplitting revisited: Optima-preserving elimination of
partition candidates." (2004).
'''

import logging
import math
import numbers

import numpy as np
import pandas as pd

from idisc.discretization.block_range import RangeAccumulator
from idisc.discretization.blocks import aggregate_blocks
from idisc.discretization.categorizer import Categorizer, IntervalCategory
from idisc.util.arguments import check_discretization_arguments
from idisc.util.errors import InsufficientDataError
from idisc.util.metrics import class_information_entropy

logger = logging.getLogger(__name__)


class Split:
    def __init__(self, left, right, entropy):
        '''
        Params
        ------
        left, right
            BlockRange on each side of the cut point
        entropy
            class information entropy of the bi-partition
        '''
        self.left = left
        self.right = right
        self.entropy = entropy

    @property
    def cut_index(self):
        '''Index of the last block on the left of the cut point'''
        return self.left.last_index

    def __repr__(self):
        return 'Split(cut_index={}, entropy={:.4f})'.format(self.cut_index, self.entropy)


class PartitionNode:
    def __init__(self, block_range, depth=0):
        self.block_range = block_range
        self.depth = depth
        self.split = None
        self.left = None
        self.right = None

    @property
    def is_terminal(self):
        return self.left is None and self.right is None

    def leaves(self):
        '''Terminal nodes, left to right (i.e. by increasing value)'''
        leaves = []
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_terminal:
                leaves.append(node)
            else:
                stack.append(node.right)
                stack.append(node.left)
        return leaves

    @property
    def n_leaves(self):
        return len(self.leaves())

    def __str__(self):
        r = self.block_range
        if self.is_terminal:
            return f'blocks [{r.first_index}, {r.last_index}] (leaf, n={r.instance_count}, H={r.entropy:0.3f})'
        return f'blocks [{r.first_index}, {r.last_index}] split after block {self.split.cut_index} ' \
               f'(E={self.split.entropy:0.3f})'

    def __repr__(self):
        return self.__str__()


def find_best_split(block_range, accumulator):
    '''
    Evaluates every cut point of a range and returns the one minimizing class information entropy
    :param block_range: BlockRange to be split
    :param accumulator: RangeAccumulator over the same blocks
    :return: Split; the lowest cut index wins ties. None if the range is a single block
    '''
    if block_range.is_single_block:
        return None
    first, last = block_range.first_index, block_range.last_index
    best = None
    for i in range(first, last):
        left = accumulator.range(first, i)
        right = accumulator.range(i + 1, last)
        current_entropy = class_information_entropy(left, right)
        # strict comparison keeps the first minimizer
        if best is None or current_entropy < best.entropy:
            best = Split(left, right, current_entropy)
    return best


def mdlpc_criterion(parent, split):
    '''
    Determines whether a bi-partition is accepted according to the MDLPC criterion
    :param parent: BlockRange being split
    :param split: the entropy minimizing Split of parent
    :return: True/False, whether to accept the partition
    '''
    n = parent.instance_count
    if n < 2:
        raise ValueError("The MDLPC criterion needs at least 2 instances, got {}.".format(n))
    k = parent.observed_class_count
    k_left = split.left.observed_class_count
    k_right = split.right.observed_class_count

    gain = parent.entropy - split.entropy
    delta = math.log2(3 ** k - 2) - k * parent.entropy \
        + k_left * split.left.entropy + k_right * split.right.entropy
    gain_threshold = (math.log2(n - 1) + delta) / n

    return gain > gain_threshold


def build_partition_tree(blocks, accumulator=None, max_depth=None):
    '''
    Recursively bi-partitions the range of all blocks while the MDLPC criterion accepts the splits
    :param blocks: list of Block in increasing value order
    :param accumulator: RangeAccumulator over blocks, built if None
    :param max_depth: optional limit on the depth of the tree (root has depth 0)
    :return: root PartitionNode
    '''
    if len(blocks) == 0:
        raise InsufficientDataError("Cannot build a partition tree without blocks.")
    if accumulator is None:
        accumulator = RangeAccumulator(blocks)

    root = PartitionNode(accumulator.full_range())
    stack = [root]
    while stack:
        node = stack.pop()
        block_range = node.block_range
        # pure ranges are left intact
        if block_range.is_pure:
            continue
        if max_depth is not None and node.depth >= max_depth:
            continue
        split = find_best_split(block_range, accumulator)
        if split is None:
            continue
        if not mdlpc_criterion(block_range, split):
            logger.debug('rejected split of %s after block %d', block_range, split.cut_index)
            continue
        logger.debug('accepted split of %s after block %d (E=%.4f)',
                     block_range, split.cut_index, split.entropy)
        node.split = split
        node.left = PartitionNode(split.left, depth=node.depth + 1)
        node.right = PartitionNode(split.right, depth=node.depth + 1)
        stack.append(node.right)
        stack.append(node.left)
    return root


def _midpoint(a, b):
    m = (a + b) / 2.0
    if math.isinf(m):  # a + b overflowed
        m = a / 2.0 + b / 2.0
    return m


def _cut_point(lo, hi):
    '''
    Boundary between the largest value lo left of a cut and the smallest value hi right of it.
    The midpoint can round onto hi when lo and hi are adjacent doubles, which would move hi
    into the left (right-closed) interval; the boundary is kept in [lo, hi).
    '''
    m = float(_midpoint(lo, hi))
    if m >= hi:
        m = float(np.nextafter(hi, -math.inf))
    return max(m, lo)


def materialize_categorizer(blocks, leaves):
    '''
    Turns the leaves of a partition tree into labeled intervals
    :param blocks: list of Block the tree was built on
    :param leaves: terminal PartitionNode (or BlockRange) objects, left to right
    :return: Categorizer with one category per leaf
    '''
    last_block = len(blocks) - 1
    categories = []
    for leaf in leaves:
        block_range = getattr(leaf, 'block_range', leaf)
        a, b = block_range.first_index, block_range.last_index
        if a == 0:
            lower_bound = -math.inf
        else:
            lower_bound = _cut_point(blocks[a - 1].last_value, blocks[a].first_value)
        if b == last_block:
            upper_bound = math.inf
        else:
            upper_bound = _cut_point(blocks[b].last_value, blocks[b + 1].first_value)
        categories.append(IntervalCategory.from_bounds(lower_bound, upper_bound))
    return Categorizer(categories)


class MDLPResult:
    """Outcome of discretizing one attribute: the categorizer and how it was obtained.
    """

    def __init__(self, categorizer, blocks, tree, classes):
        self.categorizer = categorizer
        self.blocks = blocks
        self.tree = tree
        self.classes = classes


def fit_mdlp(values, labels, merge_pure=False, max_depth=None):
    '''
    Discretizes one numeric attribute against class labels
    :param values: numeric values, in any order
    :param labels: class label of each value (any sortable tokens)
    :param merge_pure: merge runs of same-class pure blocks before searching for cut points
    :param max_depth: optional limit on the recursion depth
    :return: MDLPResult
    '''
    values, class_codes, classes = check_discretization_arguments(values, labels)
    blocks = aggregate_blocks(values, class_codes, n_classes=classes.shape[0], merge_pure=merge_pure)
    tree = build_partition_tree(blocks, max_depth=max_depth)
    categorizer = materialize_categorizer(blocks, tree.leaves())
    logger.debug('%d values, %d blocks -> %d intervals', values.shape[0], len(blocks), len(categorizer))
    return MDLPResult(categorizer, blocks, tree, classes)


def discretize(values, labels, merge_pure=False, max_depth=None):
    '''
    Discretizes one numeric attribute against class labels
    :return: Categorizer
    '''
    return fit_mdlp(values, labels, merge_pure=merge_pure, max_depth=max_depth).categorizer


def _resolve_column(data, col):
    '''Column of data by label, or by zero-based position when no column has that label'''
    if col in data.columns:
        return data[col]
    if isinstance(col, numbers.Integral) and not isinstance(col, bool) and 0 <= col < data.shape[1]:
        return data.iloc[:, int(col)]
    raise ValueError("{} is not a column of the data set.".format(col))


def categorize_by_entropy_minimization(data, numerical_columns, target_column,
                                       delimiter=',', header=True, merge_pure=False, max_depth=None):
    '''
    Discretizes several numeric columns of a data set against a categorical target column
    :param data: pandas data frame, or path / buffer of delimited text
    :param numerical_columns: labels or zero-based positions of the columns to discretize
    :param target_column: label or zero-based position of the column holding the class labels
    :param delimiter: column delimiter, if data is text
    :param header: whether the first line of the text holds the column names
    :return: dict mapping each numerical column to its Categorizer
    '''
    if not isinstance(data, pd.DataFrame):
        data = pd.read_csv(data, sep=delimiter, header=0 if header else None, dtype=str)
    if data.shape[0] == 0:
        raise InsufficientDataError("The data set contains no rows.")

    target = _resolve_column(data, target_column)
    target = target.astype(str) if target.dtype == object else target
    categorizers = {}
    for col in numerical_columns:
        values = pd.to_numeric(_resolve_column(data, col), errors='raise')
        categorizers[col] = discretize(values, target, merge_pure=merge_pure, max_depth=max_depth)
        logger.info('column %s: %d interval(s)', col, len(categorizers[col]))
    return categorizers
