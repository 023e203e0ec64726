'''Interval categorizers produced by entropy-based discretization.

Each category is a labeled interval ]lower, upper]; the last one is ]lower, Inf[
so that the categories partition the real line. Finite bounds are written with
the shortest decimal representation that parses back to the same float, and
the bounds used for classification are re-parsed from that text, so a
categorizer rebuilt from its labels classifies exactly like the original.
'''

import math
import re

import numpy as np

NEGATIVE_INFINITY_TOKEN = '-Inf'
POSITIVE_INFINITY_TOKEN = 'Inf'

_LABEL_PATTERN = re.compile(r'^\]\s*(?P<lower>[^,\s]+)\s*,\s*(?P<upper>[^\]\[\s]+)\s*(?P<close>[\]\[])$')


def format_bound(value):
    '''Culture invariant, round-trip exact representation of a bound.'''
    value = float(value)
    if math.isinf(value):
        return NEGATIVE_INFINITY_TOKEN if value < 0 else POSITIVE_INFINITY_TOKEN
    if math.isnan(value):
        raise ValueError("Interval bounds cannot be NaN.")
    return repr(value)


def parse_bound(text):
    text = text.strip()
    if text == NEGATIVE_INFINITY_TOKEN:
        return -math.inf
    if text == POSITIVE_INFINITY_TOKEN:
        return math.inf
    value = float(text)
    if math.isnan(value):
        raise ValueError("Interval bounds cannot be NaN.")
    return value


def interval_label(lower_bound, upper_bound):
    '''
    Textual interval notation, e.g. "]-Inf, 12.5]", "]12.5, 47.0]" or "]47.0, Inf["
    '''
    closing = '[' if math.isinf(upper_bound) else ']'
    return ']{}, {}{}'.format(format_bound(lower_bound), format_bound(upper_bound), closing)


def parse_interval_label(label):
    '''
    Inverse of interval_label
    :return: (lower_bound, upper_bound)
    '''
    match = _LABEL_PATTERN.match(label.strip())
    if match is None:
        raise ValueError("{!r} is not a valid interval label.".format(label))
    lower_bound = parse_bound(match.group('lower'))
    upper_bound = parse_bound(match.group('upper'))
    if math.isinf(upper_bound) != (match.group('close') == '['):
        raise ValueError("Interval label {!r}: only an infinite upper bound is open.".format(label))
    if not lower_bound < upper_bound:
        raise ValueError("Interval label {!r} has lower bound not below upper bound.".format(label))
    return lower_bound, upper_bound


class IntervalCategory:
    """A labeled interval, left-open and right-closed unless the upper bound is infinite.
    """

    def __init__(self, label, lower_bound, upper_bound):
        self.label = label
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound

    @classmethod
    def from_bounds(cls, lower_bound, upper_bound):
        '''Formats the bounds and re-parses them so that they match the label exactly'''
        label = interval_label(lower_bound, upper_bound)
        return cls(label, *parse_interval_label(label))

    @classmethod
    def from_label(cls, label):
        return cls(label, *parse_interval_label(label))

    def contains(self, x):
        if math.isinf(self.upper_bound):
            return self.lower_bound < x < self.upper_bound
        return self.lower_bound < x <= self.upper_bound

    __contains__ = contains

    def mask(self, x):
        '''Vectorized membership test'''
        x = np.asarray(x, dtype=float)
        if math.isinf(self.upper_bound):
            return (self.lower_bound < x) & (x < self.upper_bound)
        return (self.lower_bound < x) & (x <= self.upper_bound)

    def __eq__(self, other):
        if not isinstance(other, IntervalCategory):
            return NotImplemented
        return (self.label, self.lower_bound, self.upper_bound) == \
               (other.label, other.lower_bound, other.upper_bound)

    def __hash__(self):
        return hash((self.label, self.lower_bound, self.upper_bound))

    def __repr__(self):
        return 'IntervalCategory({!r})'.format(self.label)


class Categorizer:
    """Ordered, immutable sequence of IntervalCategory covering the real line.

    Calling a categorizer on a value (or numeric token) returns the label of
    the first interval containing it.
    """

    def __init__(self, categories):
        categories = tuple(categories)
        if len(categories) == 0:
            raise ValueError("A categorizer needs at least one category.")
        if categories[0].lower_bound != -math.inf or categories[-1].upper_bound != math.inf:
            raise ValueError("Categories must extend from -Inf to Inf.")
        for previous, current in zip(categories[:-1], categories[1:]):
            if previous.upper_bound != current.lower_bound:
                raise ValueError("Categories {!r} and {!r} are not contiguous."
                                 .format(previous.label, current.label))
        self._categories = categories

    @classmethod
    def from_labels(cls, labels):
        '''Rebuilds a categorizer from its interval labels alone'''
        return cls(IntervalCategory.from_label(label) for label in labels)

    @classmethod
    def from_cut_points(cls, cut_points):
        '''Builds the categorizer whose interval boundaries are the sorted cut_points'''
        bounds = [-math.inf] + sorted(float(c) for c in cut_points) + [math.inf]
        return cls(IntervalCategory.from_bounds(lower, upper)
                   for lower, upper in zip(bounds[:-1], bounds[1:]))

    @property
    def categories(self):
        return self._categories

    @property
    def labels(self):
        return [category.label for category in self._categories]

    @property
    def cut_points(self):
        '''Finite boundaries between consecutive categories'''
        return [category.upper_bound for category in self._categories[:-1]]

    def __len__(self):
        return len(self._categories)

    def __iter__(self):
        return iter(self._categories)

    def __getitem__(self, index):
        return self._categories[index]

    def __eq__(self, other):
        if not isinstance(other, Categorizer):
            return NotImplemented
        return self._categories == other._categories

    def __hash__(self):
        return hash(self._categories)

    def code(self, value):
        '''Index of the first category containing value, None if none does (NaN)'''
        value = float(value)
        for index, category in enumerate(self._categories):
            if category.contains(value):
                return index
        return None

    def categorize(self, value):
        '''
        Label of the category of value
        :param value: a number or a numeric token such as "3.25"
        '''
        index = self.code(value)
        return None if index is None else self._categories[index].label

    __call__ = categorize

    def codes(self, values):
        '''Vectorized code; -1 marks values belonging to no category (NaN)'''
        values = np.asarray(values, dtype=float)
        codes = np.full(values.shape, -1, dtype=int)
        for index, category in reversed(list(enumerate(self._categories))):
            codes[category.mask(values)] = index
        return codes

    def transform(self, values):
        '''Vectorized categorize, returns an object array of labels (None for NaN)'''
        codes = self.codes(values)
        labels = np.array(self.labels + [None], dtype=object)
        return labels[codes]

    def __str__(self):
        return ', '.join(self.labels)

    def __repr__(self):
        return 'Categorizer([{}])'.format(', '.join(repr(label) for label in self.labels))
