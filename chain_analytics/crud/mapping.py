"""Column-name <-> attribute mapping for analytics records.

Several tables store a JSON column named ``metadata``, which declarative
classes cannot use as an attribute name, so the attribute key and the column
name differ. Everything that crosses the crud boundary is keyed by column name.
"""

from typing import Any, Dict, Type

from sqlalchemy import inspect

from ..core.database import Base


def row_to_dict(row: Base) -> Dict[str, Any]:
    """Plain dict of a loaded row keyed by column name."""
    return {
        attr.columns[0].name: getattr(row, attr.key)
        for attr in inspect(row).mapper.column_attrs
    }


def record_kwargs(model: Type[Base], data: Dict[str, Any]) -> Dict[str, Any]:
    """Constructor kwargs for ``model`` from a column-name keyed dict; unknown keys are dropped."""
    kwargs = {}
    for attr in inspect(model).column_attrs:
        name = attr.columns[0].name
        if name in data:
            kwargs[attr.key] = data[name]
    return kwargs
