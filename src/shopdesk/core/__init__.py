"""Core utilities and shared functionality."""

from shopdesk.core.timezone import (
    now_local,
    today_local,
    to_local,
    parse_datetime_local,
    start_of_day,
    end_of_day,
    is_date_in_range,
    local_tz,
)
from shopdesk.core.exceptions import (
    AppError,
    ValidationError,
    DuplicateSessionError,
    NotFoundError,
    AuthorizationError,
    RemoteDataError,
    RemoteIntegrityError,
    NetworkError,
    RemoteTimeoutError,
    OperationCancelledError,
)
from shopdesk.core.formatting import format_currency, format_phone
from shopdesk.core.credit import calculate_installment_dates, check_credit_limit, CreditCheck

__all__ = [
    "now_local",
    "today_local",
    "to_local",
    "parse_datetime_local",
    "start_of_day",
    "end_of_day",
    "is_date_in_range",
    "local_tz",
    "AppError",
    "ValidationError",
    "DuplicateSessionError",
    "NotFoundError",
    "AuthorizationError",
    "RemoteDataError",
    "RemoteIntegrityError",
    "NetworkError",
    "RemoteTimeoutError",
    "OperationCancelledError",
    "format_currency",
    "format_phone",
    "calculate_installment_dates",
    "check_credit_limit",
    "CreditCheck",
]
