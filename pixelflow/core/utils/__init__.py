"""
Utility modules for core functionality.

Modules:
- decorators: Timing helpers (timer)
- enum_converter: Enum parsing and conversion
- params_processor: Pydantic parameter validation and serialization
"""

from .decorators import timer
from .enum_converter import convert_enums_to_strings, enum_to_string, parse_enum
from .params_processor import params_to_dict, validate_params

__all__ = [
    "timer",
    "parse_enum",
    "enum_to_string",
    "convert_enums_to_strings",
    "params_to_dict",
    "validate_params",
]
