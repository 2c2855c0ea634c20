# sportbook/schemas/base.py
"""
Base schemas with standardized field types for consistent results.
"""
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic_core import core_schema

from ..core.exceptions import DomainException

ErrorKind = Literal["validation", "conflict", "backend", "not_found", "forbidden"]


class StandardizedModel(BaseModel):
    """Base model with standardized JSON encoding"""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True, from_attributes=True)


class Money(Decimal):
    """Money field that always serializes as float"""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        def validate_money(value: Any) -> Decimal:
            if isinstance(value, Decimal):
                return value
            if isinstance(value, (int, float, str)):
                return Decimal(str(value))
            raise ValueError(f"Cannot convert {type(value)} to Money")

        return core_schema.no_info_after_validator_function(
            validate_money,
            core_schema.union_schema(
                [
                    core_schema.int_schema(),
                    core_schema.float_schema(),
                    core_schema.str_schema(),
                    core_schema.is_instance_schema(Decimal),
                ]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                float,
                info_arg=False,
                return_schema=core_schema.float_schema(),
            ),
        )


class OperationResult(StandardizedModel):
    """
    Explicit success/failure outcome for operations with a domain failure mode.

    ``error_kind`` separates validation problems (fix the input), conflicts
    (pick another slot) and backend failures (retry the whole operation).
    """

    success: bool
    error_code: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def failure_from(cls, exc: DomainException, **extra: Any):
        return cls(
            success=False,
            error_code=exc.code,
            error_kind=exc.kind,
            message=exc.message,
            **extra,
        )


class ActionResult(OperationResult):
    """Outcome of a single-entity action (confirm, cancel, delete account)."""

    entity_id: Optional[str] = None
