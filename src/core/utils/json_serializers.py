# Copyright (c) 2024-2026 nickdsmith. All Rights Reserved.
# SPDX-License-Identifier: PROPRIETARY
#
# This file is proprietary and confidential. Unauthorized copying of this file,
# via any medium is strictly prohibited.

"""``json.dumps(default=...)`` hook shared by request bodies and JSON logs."""

from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

# Checked in order; datetime is a date subclass so one entry covers both
_CONVERTERS = (
    (BaseModel, lambda m: m.model_dump(mode="json", by_alias=True, exclude_none=True)),
    (date, lambda d: d.isoformat()),
    (Decimal, float),
    (Path, str),
    ((set, frozenset), sorted),
    (Enum, lambda e: e.value),
)


def json_serializer(obj: Any) -> Any:
    """
    Convert ``obj`` to something ``json`` can encode.

    Pydantic models become camelCase dicts without None fields, dates ISO
    strings, sets sorted lists and enums their value. Other objects fall
    back to ``__dict__`` and then ``str()``.
    """
    for types, convert in _CONVERTERS:
        if isinstance(obj, types):
            return convert(obj)
    if hasattr(obj, "__dict__"):
        return obj.__dict__
    return str(obj)


__all__ = ["json_serializer"]
