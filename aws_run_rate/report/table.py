"""
Fixed-width account cost tables.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import List, Mapping, Sequence
import logging

from ..errors import FormatError

logger = logging.getLogger(__name__)

COLUMN_PADDING = 2


@dataclass(frozen=True)
class ReportRow:
    account_name: str
    daily_amount: float
    monthly_amount: float


@dataclass(frozen=True)
class SingleRow:
    account_name: str
    amount: float


def _char_display_width(ch: str) -> int:
    """Columns a character occupies in a monospace code block."""
    codepoint = ord(ch)
    if codepoint in (0x200B, 0x200D, 0xFE0E, 0xFE0F):
        return 0
    if unicodedata.combining(ch):
        return 0
    if codepoint < 32 or (0x7F <= codepoint < 0xA0):
        return 0
    if 0x1F000 <= codepoint <= 0x1FAFF or 0x2600 <= codepoint <= 0x27BF:
        return 2
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


def display_width(s: str) -> int:
    return sum(_char_display_width(ch) for ch in (s or ""))


def _ljust_display(s: str, width: int) -> str:
    pad = max(width - display_width(s), 0)
    return s + (" " * pad)


def clean_name(name: str) -> str:
    """Keep an account name on one line and out of the code fence syntax."""
    return " ".join((name or "").replace("`", "ˋ").split())


def format_amount(amount: float) -> str:
    return f"{amount:.2f}"


def build_rows(
    accounts: Mapping[str, str],
    daily: Mapping[str, float],
    monthly: Mapping[str, float],
) -> List[ReportRow]:
    """One row per directory account, highest month-to-date spend first."""
    rows = [
        ReportRow(
            account_name=name,
            daily_amount=daily.get(account_id, 0.0),
            monthly_amount=monthly.get(account_id, 0.0),
        )
        for account_id, name in accounts.items()
    ]
    rows.sort(key=lambda r: r.monthly_amount, reverse=True)
    return rows


def build_single_rows(accounts: Mapping[str, str], costs: Mapping[str, float]) -> List[SingleRow]:
    rows = [SingleRow(account_name=name, amount=costs.get(account_id, 0.0)) for account_id, name in accounts.items()]
    rows.sort(key=lambda r: r.amount, reverse=True)
    return rows


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render left-aligned columns separated by two spaces of padding."""
    if not headers:
        raise FormatError("Table needs at least one column")

    lines = [list(headers)] + [list(r) for r in rows]
    for line in lines[1:]:
        if len(line) != len(headers):
            raise FormatError(f"Row has {len(line)} cells, expected {len(headers)}: {line}")

    widths = [max(display_width(line[i]) for line in lines) for i in range(len(headers))]

    out: List[str] = []
    for line in lines:
        cells = [_ljust_display(cell, widths[i] + COLUMN_PADDING) for i, cell in enumerate(line)]
        out.append("".join(cells).rstrip())
    return "\n".join(out)


def format_run_rate(
    accounts: Mapping[str, str],
    daily: Mapping[str, float],
    monthly: Mapping[str, float],
) -> str:
    rows = build_rows(accounts, daily, monthly)
    logger.debug(f"Rendering run rate table with {len(rows)} rows")
    return render_table(
        ("Account", "Day", "Month"),
        [
            (clean_name(r.account_name), format_amount(r.daily_amount), format_amount(r.monthly_amount))
            for r in rows
        ],
    )


def format_single(accounts: Mapping[str, str], costs: Mapping[str, float]) -> str:
    rows = build_single_rows(accounts, costs)
    logger.debug(f"Rendering single metric table with {len(rows)} rows")
    return render_table(
        ("Account", "Cost"),
        [(clean_name(r.account_name), format_amount(r.amount)) for r in rows],
    )
