"""
Evaluation module - run metrics and algorithm comparison.
"""

from evaluation.metrics import FrameRecord, PerformanceMetrics, MetricsCollector
from evaluation.evaluator import AlgorithmEvaluator

__all__ = [
    'FrameRecord',
    'PerformanceMetrics',
    'MetricsCollector',
    'AlgorithmEvaluator',
]
