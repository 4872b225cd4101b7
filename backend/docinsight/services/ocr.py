# backend/docinsight/services/ocr.py
from __future__ import annotations

import base64
import re
from typing import BinaryIO, Union

from ..errors import ReadError

_ALNUM_RX = re.compile(r"[a-zA-Z0-9]")
_STRUCTURE_RX = re.compile(r"[.!?,;:\n]")

def extract_text(data: Union[bytes, BinaryIO], content_type: str | None) -> str:
    """
    Turn uploaded content into text for analysis. No real OCR happens here:
      - text/*            -> strict UTF-8 decode (ReadError on bad bytes)
      - application/pdf   -> raw bytes passed through as a base64 data URL
      - anything else     -> UTF-8 decode, invalid sequences replaced
    """
    raw = _read_all(data)
    ctype = (content_type or "").split(";")[0].strip().lower()

    if ctype.startswith("text/"):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ReadError(f"Failed to read file: not valid UTF-8 text ({e.reason})") from e

    if ctype == "application/pdf":
        return f"data:{ctype};base64,{base64.b64encode(raw).decode('ascii')}"

    return raw.decode("utf-8", errors="replace")

def confidence_score(text: str | None) -> int:
    """Shallow extraction-quality estimate in [0, 95]."""
    if not text or not text.strip():
        return 0

    words = len(text.split())
    confidence = 50
    if _ALNUM_RX.search(text):
        confidence += 20
    if _STRUCTURE_RX.search(text):
        confidence += 15
    if words > 10:
        confidence += 10
    if words > 50:
        confidence += 5

    return min(confidence, 95)


# --- helpers ---------------------------------------------------------------

def _read_all(data: Union[bytes, BinaryIO]) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    try:
        if hasattr(data, "seek"):
            data.seek(0)
        return data.read()
    except (OSError, ValueError) as e:
        raise ReadError(f"Failed to read file: {e}") from e
