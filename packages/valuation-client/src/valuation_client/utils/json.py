import math
from typing import Any


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively replace NaN and Infinity floats with None.

    Form input can carry non-finite numbers (an empty numeric field parsed as
    NaN, for instance) and strict JSON has no spelling for them, so every
    outgoing payload goes through here first.

    Args:
        obj: The payload to sanitize (dict, list, tuple, float, ...)

    Returns:
        The sanitized payload.
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    elif isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    return obj
