"""Convenience exports for the Boolean expression engine."""

import logging

from .config import (
    EngineConfig,
    MinimizationOptions,
    MinimizationStrategy,
    ResultFormat,
)
from .engine import (
    BooleanEngine,
    build_kmap,
    evaluate,
    extract_variables,
    get_default_engine,
    minimize,
    minterms,
    parse,
    simplify,
    simplify_detailed,
    to_boolean_string,
    to_latex_string,
    truth_table,
    variable_importance,
)
from .errors import (
    BooleanEngineError,
    ConversionError,
    EvalError,
    MalformedExpression,
    MinimizationFailure,
    ParseError,
)
from .expression import (
    And,
    BooleanExpression,
    Constant,
    Nand,
    Nor,
    Not,
    Or,
    Variable,
    Xnor,
    Xor,
)
from .minimizer import MinimizationResult
from .simplifier import SimplificationResult, SimplificationStep

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "And",
    "BooleanEngine",
    "BooleanEngineError",
    "BooleanExpression",
    "Constant",
    "ConversionError",
    "EngineConfig",
    "EvalError",
    "MalformedExpression",
    "MinimizationFailure",
    "MinimizationOptions",
    "MinimizationResult",
    "MinimizationStrategy",
    "Nand",
    "Nor",
    "Not",
    "Or",
    "ParseError",
    "ResultFormat",
    "SimplificationResult",
    "SimplificationStep",
    "Variable",
    "Xnor",
    "Xor",
    "build_kmap",
    "evaluate",
    "extract_variables",
    "get_default_engine",
    "minimize",
    "minterms",
    "parse",
    "simplify",
    "simplify_detailed",
    "to_boolean_string",
    "to_latex_string",
    "truth_table",
    "variable_importance",
]
