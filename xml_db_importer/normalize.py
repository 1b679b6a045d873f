"""
Value normalization applied to every field before it is bound.

- empty or missing values become NULL
- day/month/year dates (4/5/1973, 01/08/2023) become ISO dates
"""
from __future__ import annotations
import re
from datetime import datetime
from typing import Any, Optional

DMY_DATE_RE = re.compile(r"^[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}$")


def normalize_value(raw: Any) -> Optional[str]:
    """
    Normalize a raw XML text value.

    Returns None for missing or blank input, ``YYYY-MM-DD`` for a valid
    ``D/M/YYYY`` date, and the stripped text otherwise. An impossible date
    such as ``31/02/2023`` is returned unchanged.
    """
    if raw is None:
        return None

    value = str(raw).strip()
    if not value:
        return None

    if DMY_DATE_RE.match(value):
        try:
            return datetime.strptime(value, "%d/%m/%Y").date().isoformat()
        except ValueError:
            pass

    return value
