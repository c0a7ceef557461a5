"""
Asset analysis: trading pair screening by volume, volatility, liquidity and trend.
"""
from .pairs import PairMetrics, analyze_pairs, compute_pair_metrics, pair_score

__all__ = ["PairMetrics", "analyze_pairs", "compute_pair_metrics", "pair_score"]
