from __future__ import annotations

import logging
import re
from datetime import date, timedelta

from document_tree import DocumentTree, set_node_text
from formatting import format_date

logger = logging.getLogger(__name__)

_TODAY = "today"
_OFFSET_PATTERN = re.compile(r"([+-]?)(\d+)days?", re.IGNORECASE)


def resolve_date_expression(expression: str, today: date) -> date:
    """
    "today", "+30days", "-7days" or "1day" relative to ``today``.
    Anything else resolves to ``today``.
    """
    if expression == _TODAY:
        return today
    match = _OFFSET_PATTERN.fullmatch(expression or "")
    if not match:
        logger.debug("date.fallback expression=%r", expression)
        return today
    try:
        days = int(match.group(2))
        if match.group(1) == "-":
            days = -days
        return today + timedelta(days=days)
    except (OverflowError, ValueError):
        logger.debug("date.out_of_range expression=%r", expression)
        return today


def resolve_dates(tree: DocumentTree, today: date | None = None) -> int:
    reference = today or date.today()
    for placeholder in tree.dates:
        resolved = resolve_date_expression(placeholder.expression, reference)
        set_node_text(placeholder.node, format_date(resolved))
    return len(tree.dates)
