import numpy as np

from idisc.util.metrics import entropy


class BlockRange:
    """A contiguous span [first_index, last_index] of blocks (both ends included),
    summarized by the class frequency distribution of its instances.
    """

    def __init__(self, first_index, last_index, class_counts):
        if first_index > last_index:
            raise ValueError("first_index ({}) must not exceed last_index ({})."
                             .format(first_index, last_index))
        self.first_index = first_index
        self.last_index = last_index
        self.class_counts = class_counts
        self.instance_count = int(class_counts.sum())
        self.observed_class_count = int(np.count_nonzero(class_counts))
        self.entropy = entropy(class_counts)

    @property
    def n_blocks(self):
        return self.last_index - self.first_index + 1

    @property
    def is_single_block(self):
        return self.first_index == self.last_index

    @property
    def is_pure(self):
        return self.observed_class_count == 1

    def __eq__(self, other):
        if not isinstance(other, BlockRange):
            return NotImplemented
        return (self.first_index == other.first_index
                and self.last_index == other.last_index
                and np.array_equal(self.class_counts, other.class_counts))

    def __repr__(self):
        return 'BlockRange([{}, {}], n={}, k={}, H={:.4f})'.format(
            self.first_index, self.last_index, self.instance_count,
            self.observed_class_count, self.entropy)


class RangeAccumulator:
    """Computes BlockRange summaries in O(n_classes) from cumulative class counts.

    cumulative_counts_[i] holds the class counts of blocks[0:i], so the counts
    of blocks[a:b + 1] are cumulative_counts_[b + 1] - cumulative_counts_[a].
    """

    def __init__(self, blocks):
        if len(blocks) == 0:
            raise ValueError("Cannot accumulate ranges over an empty block list.")
        counts = np.vstack([block.class_counts for block in blocks])
        self.n_blocks = counts.shape[0]
        self.cumulative_counts_ = np.vstack([
            np.zeros((1, counts.shape[1]), dtype=counts.dtype),
            np.cumsum(counts, axis=0)])

    def range(self, first_index, last_index):
        if first_index < 0 or last_index >= self.n_blocks:
            raise IndexError("Block range [{}, {}] is out of bounds for {} blocks."
                             .format(first_index, last_index, self.n_blocks))
        counts = self.cumulative_counts_[last_index + 1] - self.cumulative_counts_[first_index]
        return BlockRange(first_index, last_index, counts)

    def full_range(self):
        return self.range(0, self.n_blocks - 1)
