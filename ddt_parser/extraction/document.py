"""
Parsed Document Data Classes.

This module defines the immutable records produced by the extraction
engine: one ParsedDocument per OCR pass, holding the header fields, the
ordered line items, the document totals and a reliability score.

Classes:
    LineItem: One product row of the delivery note
    ParsedDocument: Complete extraction result
"""

import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Tuple

ZERO = Decimal("0.00")

# Scalar header fields, in display order
HEADER_FIELDS = (
    'document_number',
    'document_date',
    'supplier_name',
    'supplier_tax_id',
    'supplier_address',
    'recipient_name',
    'recipient_tax_id',
    'destination_name',
    'destination_address',
    'point_of_sale',
    'transport_reason',
)

AMOUNT_FIELDS = ('subtotal', 'tax_amount', 'grand_total')


def _decimal(value: Any) -> Decimal:
    if value is None or value == '':
        return ZERO
    return Decimal(str(value))


@dataclass(frozen=True)
class LineItem:
    """
    One product row of a delivery note.

    Attributes:
        line_number: 1-based position among extracted items
        code: Product code
        description: Whitespace-collapsed description
        quantity: Delivered quantity
        unit: Canonical unit-of-measure code
        unit_price: Price per unit, 0 when the row has none
        line_total: Row amount

    Example:
        >>> item = LineItem(1, "V27", "BASILICO PAD IT.", Decimal("1"), "CS",
        ...                 Decimal("8.50"), Decimal("8.50"))
    """
    line_number: int
    code: str = ""
    description: str = ""
    quantity: Decimal = ZERO
    unit: str = "PZ"
    unit_price: Decimal = ZERO
    line_total: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            'line_number': self.line_number,
            'code': self.code,
            'description': self.description,
            'quantity': float(self.quantity),
            'unit': self.unit,
            'unit_price': float(self.unit_price),
            'line_total': float(self.line_total),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        """Create a LineItem from a dictionary produced by to_dict()."""
        return cls(
            line_number=int(data.get('line_number', 0)),
            code=data.get('code', '') or '',
            description=data.get('description', '') or '',
            quantity=_decimal(data.get('quantity')),
            unit=data.get('unit', 'PZ') or 'PZ',
            unit_price=_decimal(data.get('unit_price')),
            line_total=_decimal(data.get('line_total')),
        )


@dataclass(frozen=True)
class ParsedDocument:
    """
    Structured record extracted from the OCR text of a delivery note (DDT).

    Unmatched text fields are empty strings and unmatched totals are 0.
    The record is never modified in place; corrections build a new one.

    Attributes:
        document_number: Delivery note identifier
        document_date: ISO date (YYYY-MM-DD) or empty
        supplier_name, supplier_tax_id, supplier_address: Issuing party
        recipient_name, recipient_tax_id: Invoiced party
        destination_name, destination_address: Physical delivery point
        point_of_sale: Own retail location, set only on a brand match
        transport_reason: Causale del trasporto (e.g. "Vendita")
        line_items: Product rows in order of appearance
        subtotal, tax_amount, grand_total: Document totals
        raw_text: Verbatim OCR input, kept for audit
        confidence: Reliability score in [0, 100]
        warnings: Validation findings (informational only)

    Example:
        >>> document = parse_ddt_text(text, optical_confidence=88)
        >>> document.document_number
        "12249"
        >>> print(document.to_json())
    """
    document_number: str = ""
    document_date: str = ""
    supplier_name: str = ""
    supplier_tax_id: str = ""
    supplier_address: str = ""
    recipient_name: str = ""
    recipient_tax_id: str = ""
    destination_name: str = ""
    destination_address: str = ""
    point_of_sale: str = ""
    transport_reason: str = ""
    line_items: Tuple[LineItem, ...] = ()
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    grand_total: Decimal = ZERO
    raw_text: str = ""
    confidence: int = 0
    warnings: Tuple[str, ...] = field(default=())

    @property
    def fields(self) -> Dict[str, str]:
        """Scalar header fields as a dictionary."""
        return {name: getattr(self, name) for name in HEADER_FIELDS}

    @property
    def missing_fields(self) -> List[str]:
        """Header fields that were not extracted."""
        return [name for name, value in self.fields.items() if not value]

    @property
    def line_items_total(self) -> Decimal:
        """Sum of the line totals of all items."""
        return sum((item.line_total for item in self.line_items), ZERO)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            JSON-friendly dictionary; amounts become floats.
        """
        data: Dict[str, Any] = dict(self.fields)
        data['line_items'] = [item.to_dict() for item in self.line_items]
        for name in AMOUNT_FIELDS:
            data[name] = float(getattr(self, name))
        data['raw_text'] = self.raw_text
        data['confidence'] = self.confidence
        data['warnings'] = list(self.warnings)
        return data

    def to_json(self, indent: int = 2) -> str:
        """Convert to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParsedDocument':
        """
        Create a ParsedDocument from a dictionary produced by to_dict().

        Unknown keys are ignored so correction-form payloads with extra
        metadata (timestamps, user) can be loaded directly.
        """
        values: Dict[str, Any] = {
            name: data.get(name) or '' for name in HEADER_FIELDS
        }
        for name in AMOUNT_FIELDS:
            values[name] = _decimal(data.get(name))
        values['line_items'] = tuple(
            LineItem.from_dict(item) for item in data.get('line_items') or []
        )
        values['raw_text'] = data.get('raw_text', '') or ''
        values['confidence'] = int(data.get('confidence', 0) or 0)
        values['warnings'] = tuple(data.get('warnings') or ())
        return cls(**values)

    def __repr__(self) -> str:
        return (
            f"ParsedDocument("
            f"number={self.document_number!r}, "
            f"supplier={self.supplier_name!r}, "
            f"items={len(self.line_items)}, "
            f"total={self.grand_total}, "
            f"confidence={self.confidence})"
        )
