"""Helpers for cleaning up model output."""


def extract_json_from_response(response: str) -> str:
    """Return the span from the first ``{`` to the last ``}``, or the stripped text."""
    response = response.strip()
    start = response.find("{")
    if start == -1:
        return response
    end = response.rfind("}")
    if end == -1 or end <= start:
        return response
    return response[start : end + 1]