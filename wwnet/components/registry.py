from typing import Any, Callable, Dict

from wwnet.exceptions import ModelingFault

PROCESS_TYPES: Dict[str, type] = {}


def register_process_type(tag: str) -> Callable[[type], type]:
    """Class decorator adding a process implementation to PROCESS_TYPES under tag"""
    def decorator(cls: type) -> type:
        if tag in PROCESS_TYPES and PROCESS_TYPES[tag] is not cls:
            raise ValueError(f"Process type '{tag}' is already registered")
        cls.tag = tag
        PROCESS_TYPES[tag] = cls
        return cls
    return decorator


def make_process_impl(tag: str, **params: Any) -> Any:
    """Instantiate the process implementation registered under tag"""
    if tag not in PROCESS_TYPES:
        raise ModelingFault(f"Unknown process type: {tag}. Available: {sorted(PROCESS_TYPES)}")
    return PROCESS_TYPES[tag](**params)
