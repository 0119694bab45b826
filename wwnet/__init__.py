# wwnet/__init__.py

# Import main components
from .parameters import BaseParameter, ProcessParameter
from .loading import Load
from .model_manager import ModelManager, Process, Connection
from .solver import Solver, SolverState, RouterHandle, ParameterDefinition
from .router import Router, SingleEffluentRouter, Default
from .mass_balance import solve_network, NetworkResults
from .checker import check_balance, alert
from .exceptions import (NetworkError, StructuralFault, ModelingFault,
                         NumericalFault, SolverStateError)

# Import subpackages
from . import components
from . import utils

# Define version
__version__ = "0.1.0"

# Define all importable names
__all__ = [
    "BaseParameter",
    "ProcessParameter",
    "Load",
    "ModelManager",
    "Process",
    "Connection",
    "Solver",
    "SolverState",
    "RouterHandle",
    "ParameterDefinition",
    "Router",
    "SingleEffluentRouter",
    "Default",
    "solve_network",
    "NetworkResults",
    "check_balance",
    "alert",
    "NetworkError",
    "StructuralFault",
    "ModelingFault",
    "NumericalFault",
    "SolverStateError"
]

# Package metadata
__author__ = "Ricardo"
__email__ = "ricardo.reyes@eawag.ch"
__description__ = "Steady-state mass balance of wastewater treatment process networks"
