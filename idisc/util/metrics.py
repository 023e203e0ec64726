import numpy as np


def entropy(class_counts, base=2):
    '''
    Computes the entropy of a class frequency distribution
    :param class_counts: array with the number of instances observed for each class
    :param base: logarithm base for computation
    :return: value of entropy (0 for pure or empty distributions)
    '''
    counts = np.asarray(class_counts, dtype=float)
    counts = counts[counts > 0]
    n = counts.sum()
    if n == 0:
        return 0.0
    proportions = counts / n
    ent = -np.sum(proportions * np.log(proportions)) / np.log(base)
    # guard against -0.0 from rounding
    return max(float(ent), 0.0)


def class_information_entropy(left, right):
    '''
    Class information entropy of a bi-partition (Fayyad and Irani, eq. 1),
    i.e. the average of the two sides' entropies weighted by their sizes
    :param left: BlockRange on the left of the cut point
    :param right: BlockRange on the right of the cut point
    '''
    n_left = left.instance_count
    n_right = right.instance_count
    return (n_left * left.entropy + n_right * right.entropy) / (n_left + n_right)

