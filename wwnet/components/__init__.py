# wwnet/components/__init__.py

from .registry import PROCESS_TYPES, register_process_type, make_process_impl
from .influent import Influent, InfluentRouter
from .effluent import Effluent, EffluentRouter
from .mixing import CompleteMix, CompleteMixRouter, PassThrough, PassThroughRouter
from .splitter import Splitter, SplitterRouter
from .clarifier import Clarifier, ClarifierRouter
from .nitrification import Nitrification, NitrificationRouter

__all__ = [
    "PROCESS_TYPES",
    "register_process_type",
    "make_process_impl",
    "Influent",
    "Effluent",
    "CompleteMix",
    "PassThrough",
    "Splitter",
    "Clarifier",
    "Nitrification",
    "InfluentRouter",
    "EffluentRouter",
    "CompleteMixRouter",
    "PassThroughRouter",
    "SplitterRouter",
    "ClarifierRouter",
    "NitrificationRouter"
]
