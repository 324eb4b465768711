"""Typed runtime variables for process instances and tasks.

External values enter the runtime only through :meth:`ProcessVariable.of`,
which tags them with a :class:`VariableType` inferred from the value.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class VariableType(str, Enum):
    STRING = "String"
    INTEGER = "Integer"
    LONG = "Long"
    DOUBLE = "Double"
    BOOLEAN = "Boolean"
    DATE = "Date"
    JSON = "Json"
    FILE = "File"


class VariableScope(str, Enum):
    PROCESS = "PROCESS"
    TASK = "TASK"


def infer_type(value: Any) -> VariableType:
    """Pick the variable type tag for a runtime value.

    bool is checked before int since it is an int subclass. Integral floats
    count as Integer.
    """
    if isinstance(value, str):
        return VariableType.STRING
    if isinstance(value, bool):
        return VariableType.BOOLEAN
    if isinstance(value, int):
        return VariableType.INTEGER
    if isinstance(value, (float, Decimal)):
        if math.isfinite(value) and value == int(value):
            return VariableType.INTEGER
        return VariableType.DOUBLE
    if isinstance(value, (datetime, date)):
        return VariableType.DATE
    if value is None:
        return VariableType.STRING
    return VariableType.JSON


@dataclass(frozen=True)
class ProcessVariable:
    name: str
    type: VariableType
    value: Any
    scope: VariableScope
    process_instance_id: str | None = None
    task_id: str | None = None

    @classmethod
    def of(
        cls,
        name: str,
        value: Any,
        *,
        scope: VariableScope = VariableScope.PROCESS,
        process_instance_id: str | None = None,
        task_id: str | None = None,
        var_type: VariableType | None = None,
    ) -> ProcessVariable:
        return cls(
            name=name,
            type=var_type or infer_type(value),
            value=value,
            scope=scope,
            process_instance_id=process_instance_id,
            task_id=task_id,
        )


def to_variables(
    values: dict[str, Any] | None,
    *,
    scope: VariableScope,
    process_instance_id: str | None = None,
    task_id: str | None = None,
) -> dict[str, ProcessVariable]:
    return {
        name: ProcessVariable.of(
            name,
            value,
            scope=scope,
            process_instance_id=process_instance_id,
            task_id=task_id,
        )
        for name, value in (values or {}).items()
    }


def to_values(variables: dict[str, ProcessVariable]) -> dict[str, Any]:
    return {name: variable.value for name, variable in variables.items()}
