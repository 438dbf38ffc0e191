from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Field table of a collection row.

Maps every CollectionRecord input field to its kind (date / number / string),
its required-field default policy and the spreadsheet headers it is read from.
Headers are compared on a tolerant key: lower case, accents stripped,
punctuation and spacing collapsed ("N° Facture" == "n facture" == "N. FACTURE").
"""

__all__ = [
    "FieldKind",
    "DateFallback",
    "FieldSpec",
    "FIELD_SPECS",
    "CLASSIFICATION_FIELD",
    "header_key",
    "build_header_index",
    "resolve_columns",
]


class FieldKind(Enum):
    DATE = "date"
    NUMBER = "number"
    STRING = "string"
    CLASSIFICATION = "classification"


class DateFallback(Enum):
    """What an unparsable (non-empty) date cell turns into."""
    TODAY = "today"
    ABSENT = "absent"


@dataclass(frozen=True)
class FieldSpec:
    name: str  # CollectionRecord attribute
    kind: FieldKind
    headers: tuple[str, ...]
    required: bool = False
    date_fallback: DateFallback = DateFallback.ABSENT


# The No.CHq /Bd column: cheque number or effet due date
CLASSIFICATION_FIELD = "cheque_or_due_date"

_SPECS: tuple[FieldSpec, ...] = (
    FieldSpec("report_date", FieldKind.DATE, ("Date", "Date rapport", "Date operation", "Date remise"),
              required=True, date_fallback=DateFallback.TODAY),
    FieldSpec("client_code", FieldKind.STRING, ("Code client", "Client", "Code"), required=True),
    FieldSpec("collection_amount", FieldKind.NUMBER,
              ("Montant", "Montant encaissement", "Montant encaisse", "Montant remise"), required=True),
    FieldSpec(CLASSIFICATION_FIELD, FieldKind.CLASSIFICATION,
              ("No.CHq /Bd", "No Chq/Bd", "N° Chq / Bd", "No Cheque/Bordereau", "No cheque")),
    FieldSpec("bank_name", FieldKind.STRING, ("Banque", "Nom banque", "Banque client")),
    FieldSpec("facture_number", FieldKind.STRING, ("N° Facture", "No Facture", "Facture", "Num facture")),
    FieldSpec("deposit_reference", FieldKind.STRING, ("Reference remise", "Ref remise", "N° remise")),
    FieldSpec("day_count", FieldKind.NUMBER, ("Nb jours", "Nbr jours", "Nombre de jours", "Jours")),
    FieldSpec("rate", FieldKind.NUMBER, ("Taux", "Taux escompte")),
    FieldSpec("interest", FieldKind.NUMBER, ("Interets", "Interet", "Agios")),
    FieldSpec("commission", FieldKind.NUMBER, ("Commission", "Com")),
    FieldSpec("tax_on_transaction", FieldKind.NUMBER, ("TOB", "Taxe", "Taxe sur operation")),
    FieldSpec("discount_fees", FieldKind.NUMBER, ("Frais escompte", "Frais d'escompte")),
    FieldSpec("bank_commission", FieldKind.NUMBER, ("Commission banque", "Commission bancaire")),
    FieldSpec("reference_number", FieldKind.STRING, ("Reference", "Ref", "N° reference")),
    FieldSpec("debit_note_amount", FieldKind.NUMBER, ("Note de debit", "Montant ND", "ND")),
    FieldSpec("income", FieldKind.NUMBER, ("Produit", "Revenu", "Produits")),
    FieldSpec("impaye_date", FieldKind.DATE, ("Date impaye", "Date impayes", "Date de defaut")),
    FieldSpec("settlement_remark", FieldKind.STRING, ("Remarque reglement", "Reglement", "Observation reglement")),
    FieldSpec("remark", FieldKind.STRING, ("Remarque", "Remarques", "Observation", "Commentaire")),
)

FIELD_SPECS: dict[str, FieldSpec] = {spec.name: spec for spec in _SPECS}


def _strip_accents(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def header_key(header: Any) -> str:
    """Key form of a header for tolerant comparisons."""
    text = _strip_accents(str(header).replace("\ufeff", "")).lower()
    text = text.replace("°", " ")
    text = re.sub(r"[^0-9a-z]+", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def build_header_index(extra_aliases: Mapping[str, Iterable[str]] | None = None) -> dict[str, str]:
    """header key -> field name, including the field names themselves and config aliases.

    Config aliases are applied last so they win over built-in headers.
    """
    index: dict[str, str] = {}
    for spec in _SPECS:
        index[header_key(spec.name)] = spec.name
        for h in spec.headers:
            index[header_key(h)] = spec.name
    for field_name, aliases in (extra_aliases or {}).items():
        for h in aliases:
            index[header_key(h)] = field_name
    return index


def resolve_columns(columns: Iterable[Any], header_index: Mapping[str, str]) -> dict[str, str]:
    """field name -> source column, first matching column wins."""
    resolved: dict[str, str] = {}
    for col in columns:
        field_name = header_index.get(header_key(col))
        if field_name is not None and field_name not in resolved:
            resolved[field_name] = col
    return resolved
