"""
Manual Corrections Module.

Helpers backing the correction form shown after extraction. A parsed
document is immutable, so every helper returns a new ParsedDocument:

    - update_field: edit a scalar header field or a total
    - update_line_item: edit one row; quantity and unit price changes
      recompute the row total
    - add_line_item / remove_line_item: grow or shrink the table

Every line-item edit recomputes the subtotal as the sum of the row totals,
the same rule the extractor uses for rows without a printed total, so
manual and automatic values stay consistent.
"""

from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from ddt_parser.utils.exceptions import CorrectionError
from ddt_parser.utils.helpers import quantize_amount
from ddt_parser.utils.logger import get_logger
from ddt_parser.extraction.document import AMOUNT_FIELDS, HEADER_FIELDS, LineItem, ParsedDocument
from .normalizers import AmountNormalizer, collapse_whitespace, normalize_unit
from .validators import DocumentValidator

# Initialize module logger
logger = get_logger(__name__)

LINE_ITEM_FIELDS = ('code', 'description', 'quantity', 'unit', 'unit_price', 'line_total')
LINE_ITEM_NUMBERS = ('quantity', 'unit_price', 'line_total')

_amount_normalizer = AmountNormalizer()


def _to_decimal(field: str, value: Any) -> Decimal:
    """Convert a form value (number or comma-decimal text) to Decimal."""
    if isinstance(value, str):
        number = _amount_normalizer.parse_quantity(value)
    else:
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            number = None

    if number is None or not number.is_finite():
        raise CorrectionError(field, value, "Not a number")
    return number


def _to_amount(field: str, value: Any) -> Decimal:
    """Round a form value to cents."""
    try:
        return quantize_amount(value)
    except InvalidOperation:
        raise CorrectionError(field, value, "Amount out of range")


def _rebuild(document: ParsedDocument, items: Iterable[LineItem]) -> ParsedDocument:
    """Renumber rows, recompute the subtotal and refresh the warnings."""
    numbered = tuple(
        replace(item, line_number=index) for index, item in enumerate(items, start=1)
    )
    subtotal = _to_amount('subtotal', sum((item.line_total for item in numbered), Decimal(0)))

    updated = replace(document, line_items=numbered, subtotal=subtotal)
    return _revalidate(updated)


def _revalidate(document: ParsedDocument) -> ParsedDocument:
    validation = DocumentValidator().validate(document)
    return replace(document, warnings=tuple(validation.warnings))


def _check_index(document: ParsedDocument, index: int) -> None:
    if not 0 <= index < len(document.line_items):
        raise CorrectionError(
            'line_items',
            index,
            f"Line index out of range (document has {len(document.line_items)} rows)"
        )


def update_field(document: ParsedDocument, name: str, value: Any) -> ParsedDocument:
    """
    Set a scalar header field or a document total.

    Args:
        document: Document to correct.
        name: Field name from HEADER_FIELDS or AMOUNT_FIELDS.
        value: New value; totals accept numbers or comma-decimal text.

    Returns:
        New ParsedDocument.

    Raises:
        CorrectionError: If the field is unknown or the total is not a number.

    Example:
        >>> corrected = update_field(document, "document_number", "12250")
    """
    if name in HEADER_FIELDS:
        new_value = "" if value is None else str(value).strip()
    elif name in AMOUNT_FIELDS:
        new_value = _to_amount(name, _to_decimal(name, value))
    else:
        raise CorrectionError(name, value, "Unknown or read-only field")

    logger.debug(f"Correction: {name} {getattr(document, name)!r} -> {new_value!r}")
    return _revalidate(replace(document, **{name: new_value}))


def update_line_item(document: ParsedDocument, index: int, **changes: Any) -> ParsedDocument:
    """
    Edit one line item.

    When quantity or unit price changes, the row total is recomputed as
    quantity x unit price (rounded to cents) and an explicit line_total in
    the same call is ignored. The subtotal is always recomputed.

    Args:
        document: Document to correct.
        index: 0-based row index.
        **changes: New values for code, description, quantity, unit,
                   unit_price or line_total.

    Returns:
        New ParsedDocument.

    Raises:
        CorrectionError: On an out-of-range index, an unknown field or a
                         non-numeric amount.

    Example:
        >>> corrected = update_line_item(document, 0, quantity=2)
        >>> corrected.line_items[0].line_total
        Decimal('17.00')
    """
    _check_index(document, index)

    unknown = set(changes) - set(LINE_ITEM_FIELDS)
    if unknown:
        name = sorted(unknown)[0]
        raise CorrectionError(name, changes[name], "Unknown line item field")

    values = {}
    for name, value in changes.items():
        if name in LINE_ITEM_NUMBERS:
            values[name] = _to_decimal(name, value)
        elif name == 'unit':
            values[name] = normalize_unit(value)
        elif name == 'description':
            values[name] = collapse_whitespace(value or "")
        else:
            values[name] = "" if value is None else str(value).strip()

    item = replace(document.line_items[index], **values)
    if 'quantity' in changes or 'unit_price' in changes:
        item = replace(item, line_total=_to_amount("line_total", item.quantity * item.unit_price))

    items = list(document.line_items)
    items[index] = item
    return _rebuild(document, items)


def add_line_item(document: ParsedDocument) -> ParsedDocument:
    """Append a blank row (unit PZ, zero amounts)."""
    blank = LineItem(line_number=len(document.line_items) + 1)
    return _rebuild(document, document.line_items + (blank,))


def remove_line_item(document: ParsedDocument, index: int) -> ParsedDocument:
    """
    Remove a row and renumber the remaining ones.

    Raises:
        CorrectionError: If index is out of range.
    """
    _check_index(document, index)
    items = document.line_items[:index] + document.line_items[index + 1:]
    return _rebuild(document, items)
