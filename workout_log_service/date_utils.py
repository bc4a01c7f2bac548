import datetime as dt


def ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_standard_date(value: dt.date) -> str:
    """Display format used across the pages: ``1st Sep 2025``."""
    return f"{ordinal(value.day)} {value.strftime('%b %Y')}"


def format_input_date(value: dt.date) -> str:
    """``YYYY-MM-DD`` for ``<input type="date">`` values and ``?date=`` links."""
    return value.strftime("%Y-%m-%d")
