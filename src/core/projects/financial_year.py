import calendar
from datetime import date
from typing import Any, Callable, Optional

from src.core.projects.constants import FINANCIAL_YEAR_OPTION_COUNT

Clock = Callable[[], date]

FISCAL_YEAR_START_MONTH = 4


def system_clock() -> date:
    return date.today()


def current_fiscal_year(today: date) -> int:
    """Fiscal years run April to March and are named by the calendar year they start in."""
    if today.month >= FISCAL_YEAR_START_MONTH:
        return today.year
    return today.year - 1


def financial_year_label(year: int) -> str:
    return f"April {year} to March {year + 1}"


def financial_year_options(
    start_year: int, count: int = FINANCIAL_YEAR_OPTION_COUNT
) -> list[dict[str, Any]]:
    return [
        {"value": year, "label": financial_year_label(year)}
        for year in range(start_year, start_year + count)
    ]


def after_march_year(start_year: int, count: int = FINANCIAL_YEAR_OPTION_COUNT) -> int:
    """First year not offered as a radio option; the manual page hint refers to it."""
    return start_year + count


def is_year_beyond_range(
    year: Any, min_year: int, count: int = FINANCIAL_YEAR_OPTION_COUNT
) -> bool:
    parsed = _as_int(year)
    if parsed is None:
        return False
    return parsed > min_year + count - 1


def format_month_year(month: Any, year: Any) -> Optional[str]:
    parsed_month = _as_int(month)
    parsed_year = _as_int(year)
    if parsed_month is None or parsed_year is None or not 1 <= parsed_month <= 12:
        return None
    return f"{calendar.month_name[parsed_month]} {parsed_year}"


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
