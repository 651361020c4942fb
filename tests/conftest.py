import numpy as np
import pytest

from boolmap import BooleanEngine
from boolmap.evaluator import truth_vector
from boolmap.expression import extract_variables


@pytest.fixture
def engine():
    return BooleanEngine()


def _same_function(a, b, variables=None):
    names = variables if variables is not None else sorted(
        set(extract_variables(a)) | set(extract_variables(b))
    )
    return np.array_equal(truth_vector(a, names), truth_vector(b, names))


@pytest.fixture
def equivalent():
    return _same_function
