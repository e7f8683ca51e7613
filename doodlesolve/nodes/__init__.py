"""Remote-model stages used by the solve pipeline."""

from .interpreter import EquationInterpreter
from .solver import EquationSolver

__all__ = ["EquationInterpreter", "EquationSolver"]
