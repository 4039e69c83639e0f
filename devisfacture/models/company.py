from __future__ import annotations
from typing import Literal, Optional

from pydantic import Field

from .common import Record

DocNumberFormat = Literal["seq-mmyy", "seq/yyyy", "yyyy-seq", "seq"]


class CompanyProfile(Record):
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    website: Optional[str] = None
    ice: Optional[str] = None      # Identifiant Commun de l'Entreprise
    rc: Optional[str] = None       # Registre de Commerce
    if_tax: Optional[str] = Field(default=None, alias="if_tax")  # Identifiant Fiscal
    cnss: Optional[str] = None
    patente: Optional[str] = None
    bank_name: Optional[str] = None
    rib: Optional[str] = None
    logo_url: Optional[str] = None

    # str et non DocNumberFormat : un format inconnu retombe sur "seq"
    doc_number_format: str = "seq-mmyy"
    doc_number_prefix: str = ""


INITIAL_PROFILE = CompanyProfile(
    name="Ma Société S.A.R.L",
    address="123 Bd Mohammed V, Casablanca, Maroc",
    phone="+212 6 00 00 00 00",
    email="contact@masociete.com",
    ice="001234567890000",
    rc="12345",
    if_tax="9876543",
    bank_name="Attijariwafa Bank",
    rib="123 456 7890000000000000 00",
    doc_number_format="seq-mmyy",
    doc_number_prefix="",
)
