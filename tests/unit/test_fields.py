from __future__ import annotations

from collection_mapper.services.fields import (
    CLASSIFICATION_FIELD,
    FIELD_SPECS,
    DateFallback,
    FieldKind,
    build_header_index,
    header_key,
    resolve_columns,
)


def test_header_key_is_tolerant():
    assert header_key("N° Facture") == header_key("n facture") == header_key("N. FACTURE") == "n facture"
    assert header_key("Intérêts") == "interets"
    assert header_key("\ufeffDate ") == "date"
    assert header_key("No.CHq /Bd") == "no chq bd"


def test_required_fields_and_fallbacks():
    required = {name for name, spec in FIELD_SPECS.items() if spec.required}
    assert required == {"report_date", "client_code", "collection_amount"}
    assert FIELD_SPECS["report_date"].date_fallback is DateFallback.TODAY
    assert FIELD_SPECS["impaye_date"].date_fallback is DateFallback.ABSENT
    assert FIELD_SPECS[CLASSIFICATION_FIELD].kind is FieldKind.CLASSIFICATION


def test_resolve_columns_builtin_headers():
    index = build_header_index()
    resolved = resolve_columns(["Date", "Code Client", "MONTANT", "No Chq/Bd", "Unrelated"], index)
    assert resolved == {
        "report_date": "Date",
        "client_code": "Code Client",
        "collection_amount": "MONTANT",
        CLASSIFICATION_FIELD: "No Chq/Bd",
    }


def test_field_names_resolve_to_themselves():
    resolved = resolve_columns(["client_code", "bank_name"], build_header_index())
    assert resolved == {"client_code": "client_code", "bank_name": "bank_name"}


def test_first_matching_column_wins():
    resolved = resolve_columns(["Montant", "Montant encaissement"], build_header_index())
    assert resolved["collection_amount"] == "Montant"


def test_config_aliases_override_builtin_headers():
    index = build_header_index({"remark": ["Banque"]})
    assert resolve_columns(["Banque"], index) == {"remark": "Banque"}
