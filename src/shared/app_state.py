"""
Application state: configuration shared by the web app and the print pipeline.
"""
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_PAYMENT_METHOD = "Chèque ou virement"

LATE_PAYMENT_NOTICE = (
    "En cas de retard, le taux d'intérêt des pénalités de retard + montant de "
    "l'indemnité forfaitaire (40€) sera applicable conformément à l'article "
    "L.441-6, alinéa 12 du Code du commerce"
)


@dataclass
class IssuerDetails:
    """Company block printed at the top left of every invoice."""
    name: str = ""
    address_lines: list[str] = field(default_factory=list)
    legal_lines: list[str] = field(default_factory=list)
    vat_number: str = ""


@dataclass
class AppState:
    """Global application settings, built once from the environment."""
    data_root: Path
    history_key: str = "invoices"
    payment_method: str = DEFAULT_PAYMENT_METHOD
    issuer: IssuerDetails = field(default_factory=IssuerDetails)

    @property
    def db_path(self) -> Path:
        return self.data_root / "invoices.sqlite"

    @property
    def pdf_dir(self) -> Path:
        return self.data_root / "printed"
