"""
Extraction Pattern Rules.

Every document field owns an ordered tuple of rules. Rules are evaluated
top to bottom and the first one that matches wins; there is no scoring
across rules. Each list runs from the most specific, labelled form
("Doc. di trasporto n. 12249") down to bare structural forms, so precision
degrades gracefully as labels disappear from noisy OCR output.

All patterns target Italian transport documents (DDT).
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Pattern, Tuple, Union


@dataclass(frozen=True)
class FieldRule:
    """
    One entry of a field's ordered pattern list.

    Attributes:
        name: Short identifier used in debug logs
        pattern: Compiled regular expression
        group: Group holding the value (0 for the whole match)
        value: Fixed value to report instead of the captured text
    """
    name: str
    pattern: Pattern
    group: Union[int, str] = 1
    value: Optional[str] = None

    def extract(self, text: str, pos: int = 0) -> Optional[str]:
        """Return the rule's value for the first match in text, or None."""
        match = self.pattern.search(text, pos)
        if match is None:
            return None
        if self.value is not None:
            return self.value
        return match.group(self.group)


def first_match(
    rules: Iterable[FieldRule],
    text: str,
    transform: Optional[Callable[[str], Optional[str]]] = None
) -> Tuple[Optional[str], Optional[FieldRule]]:
    """
    Run an ordered rule list over text.

    Args:
        rules: Rules in priority order.
        text: Search area.
        transform: Optional post-processing of the captured value; a None
                   result counts as a non-match and the next rule is tried.

    Returns:
        Tuple of (value, winning rule), or (None, None) when nothing matched.
    """
    if not text:
        return None, None

    for rule in rules:
        value = rule.extract(text)
        if value is None:
            continue
        if transform is not None:
            value = transform(value)
            if value is None:
                continue
        return value, rule

    return None, None


def _rule(name: str, pattern: str, flags: int = re.IGNORECASE, **kwargs) -> FieldRule:
    return FieldRule(name=name, pattern=re.compile(pattern, flags), **kwargs)


# =============================================================================
# SHARED FRAGMENTS
# =============================================================================

# Comma-decimal amount with optional dotted thousands: 8,50 / 1.234,56 / 8.50
AMOUNT = r'(\d{1,3}(?:\.\d{3})+,\d{2}|\d+[,.]?\d{2})'

# Separator between a totals label and its amount
AMOUNT_LEAD = r'[:\s]*(?:€|EUR)?\s*'

DATE_TOKEN = r'\d{1,2}[\-/.]\d{1,2}[\-/.]\d{2,4}'
DATE_TOKEN_FULL_YEAR = r'\d{1,2}[\-/.]\d{1,2}[\-/.]\d{4}'

# "C.F./P.IVA", "C.F. e P.Iva", "P.IVA"
TAX_ID_LABEL = r'\b(?:C\.?\s*F\.?\s*[/e]?\s*)?P\.?\s*I\.?\s*VA\b'

STREET = r'\b(?:Via|Viale|Piazza|Corso|Largo|Strada|V\.le|P\.za|C\.so)\b'

UNIT_TOKEN = r'(?P<unit>CS|KG|PZ|LT|CF|CT|NR|BS|MZ|GR|UN|SC|CL)'

ROW_AMOUNT = r'\d+[,.]?\d{2}'


# =============================================================================
# DOCUMENT NUMBER
# =============================================================================

DOCUMENT_NUMBER_RULES = (
    # "Doc. di trasporto n. 12249", "DDT n° 12249"
    _rule(
        'labelled',
        r'\b(?:Doc(?:umento|\.)?\s*(?:di\s+)?trasporto|D\.?D\.?T\.?|Documento)'
        r'\s*(?:n|nr|num)\.?\s*[°º]?\s*:?\s*(\d+)'
    ),
    # "n. 12249 del 09/12/2025"
    _rule('number_before_del', r'\bn\.?\s*[°º]?\s*(\d{4,6})\s+del\b'),
    # "Numero: 12249", "Nr. 12249"
    _rule('numero', r'\b(?:Numero|Nr\.?|N\.?)\s*[°º:\s]*(\d{4,6})'),
    # Bare "12249/25" style identifier
    _rule('bare_serial', r'\b(\d{5,}/\d{2,4})\b'),
)


# =============================================================================
# DOCUMENT DATE
# =============================================================================

DOCUMENT_DATE_RULES = (
    # "del 09/12/2025"
    _rule('del', rf'\bdel\s+({DATE_TOKEN})\b'),
    # "Data: 09/12/2025"
    _rule('data', rf'\bdata[:\s]+({DATE_TOKEN})\b'),
    # A date on the same line as "Doc", "DDT" or "trasporto"
    _rule('document_line', rf'(?:Doc|DDT|trasporto)[^\n]*?\b({DATE_TOKEN_FULL_YEAR})\b'),
    # First date with a four-digit year
    _rule('first_full_date', rf'\b({DATE_TOKEN_FULL_YEAR})\b'),
)


# =============================================================================
# SUPPLIER (header window, case-sensitive)
# =============================================================================

SUPPLIER_NAME_RULES = (
    # Upper-case name ending with a company form: "QUELLI CHE LA FRUTTA SRL"
    _rule(
        'company_form',
        r"^([A-Z][A-Z \t.,&'\-]{3,50}"
        r"(?:S\.?R\.?L\.?S?|S\.?P\.?A\.?|S\.?N\.?C\.?|S\.?A\.?S\.?))(?![A-Za-z])",
        flags=re.MULTILINE
    ),
    # First significant upper-case line
    _rule('upper_case_line', r"^([A-Z][A-Z \t.,&'\-]{7,50})[ \t]*$", flags=re.MULTILINE),
)

TAX_ID_RULES = (
    _rule('tax_id_label', TAX_ID_LABEL + r'[:.\s]*(\d{11})'),
)

SUPPLIER_ADDRESS_RULES = (
    # Street line carrying a five-digit postcode
    _rule('street_with_postcode', STREET + r'[^\n]*?\b\d{5}\b[^\n]*', group=0),
)


# =============================================================================
# RECIPIENT / DESTINATION BLOCKS
# =============================================================================

RECIPIENT_START = re.compile(r'Destinatario', re.IGNORECASE)
RECIPIENT_END = re.compile(
    r'^\s*(?:Destinazione|C\.?\s*F\.?|P\.?\s*I\.?\s*VA)',
    re.IGNORECASE | re.MULTILINE
)

DESTINATION_START = re.compile(r'Destinazione', re.IGNORECASE)
DESTINATION_END = re.compile(
    r'^\s*(?:C\.?\s*F\.?|P\.?\s*I\.?\s*VA|Codice)',
    re.IGNORECASE | re.MULTILINE
)

PARTY_NAME_RULES = (
    # "Spett.le ACME SRL"
    _rule('spettabile', r"Spett\.?\s*le\s+([A-ZÀ-Ý][A-Za-zÀ-ÿ \t.'&]+)", flags=0),
    # First capitalised run on a line
    _rule('capitalised', r"([A-ZÀ-Ý][A-Za-zÀ-ÿ \t.'&]+)", flags=0),
)

STREET_ADDRESS_RULES = (
    _rule('street', rf'({STREET}[^\n]+)'),
)


# =============================================================================
# TRANSPORT REASON (CAUSALE)
# =============================================================================

TRANSPORT_REASON_RULES = (
    # "Causale del trasporto: Vendita Porto Franco"
    _rule(
        'labelled',
        r'Causale\s*(?:del\s+)?trasporto\s*[:\s]*'
        r'([A-Za-z][A-Za-z \t]*?)[ \t]*(?:\bPorto\b|\bFranco\b|\n|$)'
    ),
    # "Vendita" anywhere shortly after the label
    _rule('vendita_nearby', r'Causale[\s\S]{0,50}?Vendita', value='Vendita'),
)


# =============================================================================
# LINE-ITEM TABLE
# =============================================================================

TABLE_HEADER_MARKERS = (
    re.compile(r'Codice\s+Descrizione', re.IGNORECASE),
    re.compile(r'Cod\.?\s+Descrizione', re.IGNORECASE),
    re.compile(r'Articolo\s+Descrizione', re.IGNORECASE),
)

TABLE_FOOTER_MARKERS = (
    re.compile(r'Tot\.?\s*imponibile', re.IGNORECASE),
    re.compile(r'Totale\s+imponibile', re.IGNORECASE),
    re.compile(r'Totale\s+merce', re.IGNORECASE),
    re.compile(r'CONDIZIONI\s+DI\s+VENDITA', re.IGNORECASE),
)

TABLE_HEADER_WORDS = re.compile(
    r'^(?:Codice|Cod\.|Descrizione|Quantit[àa]|Prezzo|Articolo)',
    re.IGNORECASE
)


@dataclass(frozen=True)
class RowPattern:
    """
    A line-item row layout.

    Named groups: code, description, quantity, unit, and optionally
    unit_price and line_total.
    """
    name: str
    pattern: Pattern


ROW_PATTERNS = (
    # "V27 BASILICO PAD IT. 1 CS € 8,50 € 8,50"
    RowPattern('short_code', re.compile(
        r'^[V✓]?\s*(?P<code>\d{1,5})\s+'
        r'(?P<description>[A-Z][A-Za-z\s./\d,]+?)\s+'
        r'(?P<quantity>\d+[,.]?\d*)\s*' + UNIT_TOKEN + r'\s+'
        r'€?\s*(?P<unit_price>' + ROW_AMOUNT + r')\s*'
        r'€?\s*(?P<line_total>' + ROW_AMOUNT + r')?',
        re.IGNORECASE
    )),
    # "ART001 MOZZARELLA FIORDILATTE 10 PZ 2,50"
    RowPattern('alphanumeric_code', re.compile(
        r'^(?P<code>[A-Z]{2,5}\d{2,6})\s+'
        r'(?P<description>[A-Za-z\s./\d,]{5,45})\s+'
        r'(?P<quantity>\d+[,.]?\d*)\s*' + UNIT_TOKEN + r'\s+'
        r'€?\s*(?P<unit_price>' + ROW_AMOUNT + r')',
        re.IGNORECASE
    )),
    # "123456 POMODORO PELATO 12 CT" (no price)
    RowPattern('long_numeric_code', re.compile(
        r'^(?P<code>\d{4,8})\s+'
        r'(?P<description>[A-Za-z\s./\d,]{5,50})\s+'
        r'(?P<quantity>\d+[,.]?\d*)\s*' + UNIT_TOKEN + r'\b',
        re.IGNORECASE
    )),
)


# =============================================================================
# TOTALS
# =============================================================================

SUBTOTAL_RULES = (
    _rule('tot_imponibile', r'Tot(?:ale|\.)?\s*imponibile' + AMOUNT_LEAD + AMOUNT),
    _rule('totale_merce', r'Totale\s+merce' + AMOUNT_LEAD + AMOUNT),
    _rule('imponibile', r'Imponibile' + AMOUNT_LEAD + AMOUNT),
)

TAX_RULES = (
    _rule('tot_iva', r'Tot(?:ale|\.)?\s*Iva' + AMOUNT_LEAD + AMOUNT),
    # "IVA 22% 5,50", never the "P.IVA" label. The % is required even where OCR drops it
    _rule('iva_rate', r'(?<!\.)\bIVA\s+\d{1,2}\s*%' + AMOUNT_LEAD + AMOUNT),
)

GRAND_TOTAL_RULES = (
    _rule('tot_documento', r'Tot(?:ale|\.)?\s*documento' + AMOUNT_LEAD + AMOUNT),
    _rule('totale_da_pagare', r'Totale\s+(?:da\s+)?pagare' + AMOUNT_LEAD + AMOUNT),
    _rule(
        'totale_line_end',
        r'\bTOTALE' + AMOUNT_LEAD + AMOUNT + r'[ \t]*$',
        flags=re.IGNORECASE | re.MULTILINE
    ),
)
