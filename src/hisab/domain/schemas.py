"""Payload models for transactions and payment methods.

Field names are snake_case in Python and camelCase on the wire; the
transaction kind travels as ``type`` but ``kind`` is accepted too.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Annotated, Any, Optional, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..errors import ValidationError
from ..models.enums import DayOfWeek, PaymentType, TransactionKind, TransactionReason


def _parse_english_date(value: Any) -> datetime:
    """Accept ISO date or date-time input; aware values become naive UTC."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("English date is required")
        if raw[-1] in "Zz":
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            raise ValueError("Enter a valid ISO date (YYYY-MM-DD)") from None
    else:
        raise ValueError("English date must be an ISO date string")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


PositiveAmount = Annotated[float, Field(gt=0, strict=True, allow_inf_nan=False)]
NepaliDate = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
EnglishDate = Annotated[datetime, BeforeValidator(_parse_english_date)]
Notes = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class TransactionCreate(_WireModel):
    """Full transaction payload accepted by the create operation."""

    day: DayOfWeek
    nepali_date: NepaliDate
    english_date: EnglishDate
    kind: TransactionKind = Field(alias="type")
    amount: PositiveAmount
    reason: TransactionReason
    payment_type: PaymentType
    notes: Optional[Notes] = None


class TransactionUpdate(_WireModel):
    """Partial payload; only present fields are validated and applied."""

    day: Optional[DayOfWeek] = None
    nepali_date: Optional[NepaliDate] = None
    english_date: Optional[EnglishDate] = None
    kind: Optional[TransactionKind] = Field(default=None, alias="type")
    amount: Optional[PositiveAmount] = None
    reason: Optional[TransactionReason] = None
    payment_type: Optional[PaymentType] = None
    notes: Optional[Notes] = None

    @field_validator(
        "day", "nepali_date", "english_date", "kind", "amount", "reason", "payment_type",
        mode="before",
    )
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        """A field that is sent must carry a value; only notes may be cleared."""

        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller actually sent."""

        return self.model_dump(exclude_unset=True)


class BalanceUpdate(_WireModel):
    """Manual override of a payment method balance."""

    balance: Annotated[float, Field(strict=True, allow_inf_nan=False)]


class TransactionRead(_WireModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    day: DayOfWeek
    nepali_date: str
    english_date: datetime
    kind: TransactionKind = Field(alias="type")
    amount: float
    reason: TransactionReason
    payment_type: PaymentType
    notes: Optional[str] = None
    created_at: datetime


class PaymentMethodRead(_WireModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    name: PaymentType
    balance: float
    updated_at: datetime


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model_cls: type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` against ``model_cls`` raising the domain ValidationError."""

    if not isinstance(data, Mapping):
        raise ValidationError.single("__root__", "Expected a JSON object", "model_type")
    try:
        return model_cls.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def dump(model: BaseModel) -> dict[str, Any]:
    """Serialize a read model into its JSON wire shape."""

    return model.model_dump(mode="json", by_alias=True)


__all__ = [
    "BalanceUpdate",
    "PaymentMethodRead",
    "TransactionCreate",
    "TransactionRead",
    "TransactionUpdate",
    "dump",
    "parse_payload",
]
