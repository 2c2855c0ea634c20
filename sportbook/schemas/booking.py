# sportbook/schemas/booking.py
"""
Booking schemas.

``RecurringBookingRequest`` is the ephemeral selection made on the booking
screen; it is never persisted. Only its valid dates become Booking rows.
"""

from datetime import date, time
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.constants import PlanDuration
from .availability import TimeSlot
from .base import Money, OperationResult, StandardizedModel


class RecurringBookingRequest(BaseModel):
    teacher_id: str
    student_id: str
    start_date: Optional[date] = None
    weekdays: List[int] = Field(default_factory=list, description="Sunday=0 .. Saturday=6")
    duration: PlanDuration = PlanDuration.ONE_MONTH
    slot: Optional[TimeSlot] = None
    attendee_count: int = 1
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("weekdays")
    @classmethod
    def _dedupe_weekdays(cls, value: List[int]) -> List[int]:
        for day in value:
            if day < 0 or day > 6:
                raise ValueError("weekdays must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))


class DatePartition(BaseModel):
    valid_dates: List[date] = Field(default_factory=list)
    conflict_dates: List[date] = Field(default_factory=list)


class PriceQuote(StandardizedModel):
    attendee_count: int
    price_per_session: Money
    session_count: int
    total_price: Money
    is_group_rate: bool = False


class BookingPreview(StandardizedModel):
    teacher_id: str
    slot: TimeSlot
    dates: List[date]
    valid_dates: List[date]
    conflict_dates: List[date]
    quote: PriceQuote

    @property
    def can_submit(self) -> bool:
        return len(self.valid_dates) > 0


class BookingCreationResult(OperationResult):
    booking_ids: List[str] = Field(default_factory=list)
    created_dates: List[date] = Field(default_factory=list)
    skipped_dates: List[date] = Field(default_factory=list, description="Dates excluded as conflicts")
    failed_dates: List[date] = Field(default_factory=list, description="Dates that could not be written")
    price_per_session: Optional[Money] = None
    total_price: Optional[Money] = None


class BookingOut(StandardizedModel):
    id: str
    student_id: str
    teacher_id: str
    booking_date: date
    start_time: time
    end_time: time
    status: str
    total_price: Money
    attendee_count: int
    notes: Optional[str] = None
    previous_date: Optional[date] = None
    previous_start_time: Optional[time] = None
    previous_end_time: Optional[time] = None
    cancelled_by: Optional[str] = None


class RescheduleOption(BaseModel):
    booking_date: date
    slot: TimeSlot


class RescheduleResult(OperationResult):
    booking_id: str
    booking_date: Optional[date] = None
    slot: Optional[TimeSlot] = None
    status: Optional[str] = None
    initiated_by: Optional[str] = None


class MonthlyEarnings(StandardizedModel):
    month: str  # e.g. "2024-06"
    earnings: Money = Decimal("0")
    bookings: int = 0


class EarningsSummary(StandardizedModel):
    teacher_id: str
    months: List[MonthlyEarnings]
    total_earnings: Money
    total_bookings: int
    unique_students: int
    average_per_booking: Money
    growth_rate: Optional[float] = None


RescheduleInitiator = Literal["student", "teacher"]

