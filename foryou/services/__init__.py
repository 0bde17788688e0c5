"""Services package - ranking pipeline."""
from .affinity import AffinityEngine
from .config_provider import ConfigProvider, default_weights, merge_weights
from .diversity import DiversitySelector
from .exposure import ExposureRecorder
from .feature_flags import ConfigBasedFeatureFlagService
from .feed import ForYouService
from .ranking import Scorer, ScoringContext, ScoringStrategy
from .retrieval import CandidateRetriever
from .signals import SignalJoiner
from .suppression import SuppressionFilter, resolve_identity
from .variants import assign_variant, normalize_variant

__all__ = [
    "AffinityEngine",
    "CandidateRetriever",
    "ConfigBasedFeatureFlagService",
    "ConfigProvider",
    "DiversitySelector",
    "ExposureRecorder",
    "ForYouService",
    "Scorer",
    "ScoringContext",
    "ScoringStrategy",
    "SignalJoiner",
    "SuppressionFilter",
    "assign_variant",
    "default_weights",
    "merge_weights",
    "normalize_variant",
    "resolve_identity",
]
