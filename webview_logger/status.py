"""
Status extraction - decodes captured payloads and looks for a status field
"""

import json

from .models import StatusExtraction


def _reject_constant(name: str) -> float:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def extract_status(text: str, status_key: str = "status") -> StatusExtraction:
    """
    Try to read a status value from a captured payload.

    The payload is encoded as UTF-8 and decoded as strict JSON: NaN and
    Infinity are rejected, and the top level must be an object or array.
    Only a top-level object with a string value under ``status_key`` counts
    as a capture.

    Args:
        text: HTML document text or raw message body
        status_key: Object key holding the status value

    Returns:
        StatusExtraction describing the outcome (never raises)
    """
    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError:
        return StatusExtraction(
            outcome="encoding_error", message="Failed to convert HTML to data."
        )

    try:
        obj = json.loads(data, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        return StatusExtraction(outcome="invalid_json", message=f"Error parsing JSON: {e}")

    if not isinstance(obj, (dict, list)):
        kind = type(obj).__name__
        return StatusExtraction(
            outcome="invalid_json",
            message=f"Error parsing JSON: top-level {kind} is not an object or array",
        )

    if not isinstance(obj, dict):
        return StatusExtraction(outcome="not_object", message="Failed to parse JSON from HTML.")

    value = obj.get(status_key)
    if not isinstance(value, str):
        return StatusExtraction(
            outcome="missing_status", message="Status key not found in the response."
        )

    return StatusExtraction(
        outcome="captured", status=value, message=f"Captured status value: {value}"
    )
