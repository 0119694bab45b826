"""
Error taxonomy for the network mass-balance solver.

    - StructuralFault: graph mutation that would break model consistency
    - ModelingFault: router or load definition that leaves the system undetermined
    - NumericalFault: singular or non-finite linear system, tagged with the failing stage
    - SolverStateError: operation called in the wrong solver state
"""
from typing import Optional


class NetworkError(Exception):
    """Base class for all wwnet errors"""


class StructuralFault(NetworkError, ValueError):
    """Duplicate identifier, missing endpoint or dangling reference"""


class ModelingFault(NetworkError, ValueError):
    """Undeclared parameter, invalid fraction or unsupported process wiring"""


class NumericalFault(NetworkError, ArithmeticError):
    """Linear system could not be solved"""

    def __init__(self, stage: str, message: str, process: Optional[int] = None):
        self.stage = stage
        self.process = process
        super().__init__(f"[{stage}] {message}")


class SolverStateError(NetworkError, RuntimeError):
    """Solver operation called outside its allowed state"""
