"""
Parameter processing utilities.

Handles preparation and validation of operation parameters, providing
unified parameter handling across the filter pipeline.
"""

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError

from pixelflow.core.exceptions import InvalidParameter
from pixelflow.core.utils.enum_converter import convert_enums_to_strings

T = TypeVar("T", bound=BaseModel)


def validate_params(data: Any, params_class: Type[T], name: str = "params") -> T:
    """
    Validate raw data into a parameter model.

    Args:
        data: Model instance or mapping of field values
        params_class: Pydantic parameter class
        name: Parameter name reported on failure

    Returns:
        Validated parameters instance

    Raises:
        InvalidParameter: If pydantic rejects the data
    """
    if isinstance(data, params_class):
        return data
    try:
        return params_class.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidParameter(name, data, errors) from e


def params_to_dict(params: BaseModel, convert_enums: bool = True) -> Dict[str, Any]:
    """
    Convert Pydantic params to dictionary.

    Args:
        params: Pydantic parameter model instance
        convert_enums: Whether to convert enum values to strings

    Returns:
        Dictionary representation of parameters

    Example:
        >>> params_to_dict(GaussianBlurStep(size=5))
        {'op': 'gaussian_blur', 'constant_value': 0.0, 'size': 5}
    """
    data = params.model_dump(exclude_none=True)
    return convert_enums_to_strings(data) if convert_enums else data
