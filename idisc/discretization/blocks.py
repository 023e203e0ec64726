'''Aggregation of a numeric sample into blocks.

A block is a maximal run of sorted instances sharing the same attribute
value, carrying the class frequency distribution of those instances.
Cut points are only ever placed between blocks.
'''

import numpy as np


class Block:
    def __init__(self, first_value, last_value, first_position, last_position, class_counts):
        '''
        Params
        ------
        first_value, last_value
            smallest and largest attribute value in the block (equal unless
            pure blocks were merged)
        first_position, last_position
            positions of the block's first and last instances in the sorted sample
        class_counts
            integer array, class_counts[c] is the number of instances of class c
        '''
        self.first_value = first_value
        self.last_value = last_value
        self.first_position = first_position
        self.last_position = last_position
        self.class_counts = class_counts

    @property
    def instance_count(self):
        return int(self.class_counts.sum())

    @property
    def observed_class_count(self):
        return int(np.count_nonzero(self.class_counts))

    @property
    def is_pure(self):
        return self.observed_class_count == 1

    @property
    def mode(self):
        '''Most frequent class code (the lowest code on ties).'''
        return int(np.argmax(self.class_counts))

    def __eq__(self, other):
        if not isinstance(other, Block):
            return NotImplemented
        return (self.first_value == other.first_value
                and self.last_value == other.last_value
                and self.first_position == other.first_position
                and self.last_position == other.last_position
                and np.array_equal(self.class_counts, other.class_counts))

    def __repr__(self):
        return 'Block(values=[{}, {}], positions=[{}, {}], counts={})'.format(
            self.first_value, self.last_value, self.first_position, self.last_position,
            self.class_counts.tolist())


def aggregate_blocks(values, class_codes, n_classes=None, merge_pure=False):
    '''
    Sorts the sample by value and collapses equal values into blocks
    :param values: finite attribute values
    :param class_codes: integer class code of each value, in [0, n_classes)
    :param n_classes: number of classes; inferred from class_codes if None
    :param merge_pure: if True, consecutive pure blocks of the same class are merged (Elomaa and Rousu)
    :return: list of Block, in strictly increasing value order
    '''
    values = np.asarray(values, dtype=float)
    class_codes = np.asarray(class_codes, dtype=int)
    if n_classes is None:
        n_classes = int(class_codes.max()) + 1 if class_codes.size else 0

    if values.size == 0:
        return []

    order = np.argsort(values, kind='stable')
    sorted_values = values[order]
    sorted_codes = class_codes[order]

    # positions where a new value starts
    starts = np.flatnonzero(np.r_[True, sorted_values[1:] != sorted_values[:-1]])
    ends = np.r_[starts[1:], sorted_values.shape[0]]

    blocks = []
    for start, end in zip(starts, ends):
        counts = np.bincount(sorted_codes[start:end], minlength=n_classes)
        value = sorted_values[start]
        blocks.append(Block(value, value, int(start), int(end - 1), counts))

    if merge_pure:
        blocks = merge_pure_blocks(blocks)
    return blocks


def merge_pure_blocks(blocks):
    '''
    Merges maximal runs of contiguous pure blocks sharing the same class.
    Such runs contain no boundary point, so no optimal cut lies inside them.
    '''
    merged = []
    for block in blocks:
        previous = merged[-1] if merged else None
        if (previous is not None and previous.is_pure and block.is_pure
                and previous.mode == block.mode):
            merged[-1] = Block(previous.first_value, block.last_value,
                               previous.first_position, block.last_position,
                               previous.class_counts + block.class_counts)
        else:
            merged.append(block)
    return merged
