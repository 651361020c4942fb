"""Engine configuration and minimization options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_EVALUATION_CACHE_SIZE = 1000
DEFAULT_MINTERM_CACHE_SIZE = 256
DEFAULT_KMAP_CACHE_SIZE = 128
DEFAULT_IMPORTANCE_CACHE_SIZE = 128
DEFAULT_MAX_RULE_ITERATIONS = 100
DEFAULT_MAX_QMC_VARIABLES = 16
DEFAULT_VERIFY_MAX_VARIABLES = 12
DEFAULT_IMPORTANCE_EXACT_MAX_VARIABLES = 10
DEFAULT_IMPORTANCE_SAMPLES = 1000


class MinimizationStrategy(str, Enum):
    AUTO = "auto"
    TERM_COMBINATION = "term_combination"
    KARNAUGH_MAP = "karnaugh_map"
    QUINE_MCCLUSKEY = "quine_mccluskey"


class ResultFormat(str, Enum):
    MINIMAL = "minimal"
    INTERMEDIATE = "intermediate"
    BOTH = "both"


@dataclass(frozen=True)
class EngineConfig:
    """Cache capacities and algorithm limits shared by one engine instance."""

    evaluation_cache_size: int = DEFAULT_EVALUATION_CACHE_SIZE
    minterm_cache_size: int = DEFAULT_MINTERM_CACHE_SIZE
    kmap_cache_size: int = DEFAULT_KMAP_CACHE_SIZE
    importance_cache_size: int = DEFAULT_IMPORTANCE_CACHE_SIZE
    max_rule_iterations: int = DEFAULT_MAX_RULE_ITERATIONS
    max_qmc_variables: int = DEFAULT_MAX_QMC_VARIABLES
    verify_max_variables: int = DEFAULT_VERIFY_MAX_VARIABLES
    importance_exact_max_variables: int = DEFAULT_IMPORTANCE_EXACT_MAX_VARIABLES
    importance_samples: int = DEFAULT_IMPORTANCE_SAMPLES

    def __post_init__(self) -> None:
        if self.max_rule_iterations < 1:
            raise ValueError("max_rule_iterations must be at least 1.")
        if self.importance_samples < 1:
            raise ValueError("importance_samples must be at least 1.")


@dataclass(frozen=True)
class MinimizationOptions:
    strategy: MinimizationStrategy = MinimizationStrategy.AUTO
    max_iterations: Optional[int] = None
    result_format: ResultFormat = ResultFormat.MINIMAL


DEFAULT_CONFIG = EngineConfig()


__all__ = [
    "DEFAULT_CONFIG",
    "EngineConfig",
    "MinimizationOptions",
    "MinimizationStrategy",
    "ResultFormat",
]
