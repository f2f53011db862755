"""Shared fixtures for the DDT parser test suite."""

from collections.abc import Generator

import pytest

from config import CONFIG_ENV_VAR, ConfigurationManager
from ddt_parser.extraction import DDTExtractor, ParsedDocument

SAMPLE_DDT = """QUELLI CHE LA FRUTTA SRL
Via Roma 12 - 80100 Napoli (NA)
C.F./P.IVA: 01234567890
Tel. 081 1234567
Doc. di trasporto n. 12249 del 09/12/2025
Destinatario:
FRADIAVOLO SRL
Corso Italia 5
C.F./P.IVA: 09876543210
Destinazione:
FRADIAVOLO PIZZERIA
Via Toledo 100 Napoli
Codice Descrizione Quantità UM Prezzo Importo
27 BASILICO PAD IT. 1 CS € 8,50 € 8,50
31 POMODORINI CILIEGINO 2 KG € 4,00 € 8,00
45 RUCOLA SELVATICA BIO 3 BS € 2,85 € 8,55
Tot. imponibile € 25,05
Tot. Iva € 2,51
Tot. documento € 27,56
Causale del trasporto: Vendita Porto Franco
"""


@pytest.fixture(autouse=True)
def default_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run every test against the bundled settings.yaml."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def sample_text() -> str:
    """OCR text of a complete delivery note."""
    return SAMPLE_DDT


@pytest.fixture
def extractor() -> DDTExtractor:
    """Extractor built from the default configuration."""
    return DDTExtractor()


@pytest.fixture
def sample_document(extractor: DDTExtractor, sample_text: str) -> ParsedDocument:
    """Parsed sample delivery note."""
    return extractor.extract(sample_text)
