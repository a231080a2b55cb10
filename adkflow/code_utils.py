"""Helpers for encoding files and extracting and formatting code blocks."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Iterable

from .executor_base import CodeBlockDelimiter, ExecutionResult, ExecutionResultDelimiter


def _is_base64(data: bytes) -> bool:
    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        return False
    return base64.b64encode(decoded) == data


def get_encoded_file_content(data: bytes) -> str:
    """Return ``data`` base64-encoded, unless it already is canonical base64."""
    data = bytes(data)
    if _is_base64(data):
        return data.decode("ascii")
    return base64.b64encode(data).decode("ascii")


def extract_code_and_truncate_content(
    content: str, code_block_delimiters: Iterable[CodeBlockDelimiter]
) -> str:
    """Return the code inside the first delimited block of ``content``, or ``""``."""
    if not content:
        return ""
    delimiters = list(code_block_delimiters)
    leading = "|".join(re.escape(d.start) for d in delimiters)
    trailing = "|".join(re.escape(d.end) for d in delimiters)
    pattern = re.compile(
        r"(?P<prefix>.*?)(?:" + leading + r")(?P<code>.*?)(?:" + trailing + r")(?P<suffix>.*?)\Z",
        re.DOTALL,
    )
    match = pattern.search(content)
    if match is None:
        return ""
    return match.group("code")


def format_code_block(code: str, delimiter: CodeBlockDelimiter) -> str:
    """Wrap ``code`` in the given delimiters."""
    return delimiter.start + code + delimiter.end


def format_execution_result(result: ExecutionResult, delimiter: ExecutionResultDelimiter) -> str:
    """Render an execution result for inclusion in model input."""
    parts = [delimiter.start]
    if result.stderr:
        parts.append("Error: ")
        parts.append(result.stderr)
    else:
        parts.append("Code execution result:\n")
        parts.append(result.stdout)
        if result.output_files:
            parts.append("\n\nSaved artifacts:\n")
            parts.append(",".join(f"`{f.name}`" for f in result.output_files))
    parts.append(delimiter.end)
    return "".join(parts)