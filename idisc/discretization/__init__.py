from .blocks import Block, aggregate_blocks, merge_pure_blocks
from .block_range import BlockRange, RangeAccumulator
from .categorizer import Categorizer, IntervalCategory, format_bound, parse_bound, parse_interval_label
from .mdlp import (PartitionNode, Split, MDLPResult, build_partition_tree, categorize_by_entropy_minimization,
                   discretize, find_best_split, fit_mdlp, materialize_categorizer, mdlpc_criterion)
from .discretizer import MDLPDiscretizer
