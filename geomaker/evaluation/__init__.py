"""
Evaluation Package.

Metrics aggregation for the running simulation and synthesis of the
evaluation artifacts produced when a run terminates.
"""

from .clustering import CLUSTER_METHODS, AugmentedPoint, ClusterPoint, ClusterProjection
from .curves import CurveData, CurvePoint
from .history import METRIC_COLUMNS, MetricsHistory
from .inspection import IndividualInspection, simulate_inspection
from .metrics import AggregateMetrics, ClassificationReport, ClassMetrics, ConfusionMatrix
from .synthesizer import ErrorSample, ResultsBundle, synthesize_results

__all__ = [
    "CLUSTER_METHODS",
    "AugmentedPoint",
    "ClusterPoint",
    "ClusterProjection",
    "CurveData",
    "CurvePoint",
    "METRIC_COLUMNS",
    "MetricsHistory",
    "IndividualInspection",
    "simulate_inspection",
    "AggregateMetrics",
    "ClassificationReport",
    "ClassMetrics",
    "ConfusionMatrix",
    "ErrorSample",
    "ResultsBundle",
    "synthesize_results",
]
