"""
Grid search module.

Expands parameter grids and selects the best combination by composite score.
"""
from .grid_search import ParameterGrid, grid_from_dict
from .optimizer import optimize_strategy, composite_score, GridPointResult, OptimizationResult

__all__ = [
    'ParameterGrid',
    'grid_from_dict',
    'optimize_strategy',
    'composite_score',
    'GridPointResult',
    'OptimizationResult',
]
