#!/usr/bin/env python3
"""Sample collection workbook generator.

Generates synthetic bank collection sheets (cheques and effets mixed in one
"No.CHq /Bd" column) for manual runs and throughput checks of the mapper.
The generated workbooks follow the layout the mapper reads by default:
- Row 1: Header row
- Row 2+: Data rows

A share of the cells is deliberately malformed (French number formats,
unparsable dates, free text in No.CHq /Bd) so that a run also exercises the
diagnostic path.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

HEADERS = [
    "Date",
    "Code client",
    "Montant",
    "No.CHq /Bd",
    "Banque",
    "N° Facture",
    "Nb jours",
    "Taux",
    "Interets",
    "Commission",
    "Remarque",
]

BANKS = ["BMCE", "Attijariwafa", "BCP", "CIH", "Societe Generale"]


def _cheque_or_due_date(rng: np.random.Generator, day: pd.Timestamp) -> Any:
    roll = rng.random()
    if roll < 0.45:
        return int(rng.integers(1_000_000, 9_999_999))  # cheque number
    if roll < 0.55:
        return f"{int(rng.integers(0, 999_999)):07d}"  # cheque number with leading zeros
    if roll < 0.85:
        return (day + pd.Timedelta(days=int(rng.integers(30, 120)))).to_pydatetime()
    if roll < 0.97:
        return (day + pd.Timedelta(days=int(rng.integers(30, 120)))).strftime("%d/%m/%Y")
    return "voir bordereau"  # unresolvable


def _amount(rng: np.random.Generator) -> Any:
    value = round(float(rng.uniform(100, 250_000)), 2)
    roll = rng.random()
    if roll < 0.7:
        return value
    if roll < 0.9:
        # French format: NBSP thousands separator, decimal comma
        whole, frac = f"{value:.2f}".split(".")
        groups = f"{int(whole):,}".replace(",", "\u00a0")
        return f"{groups},{frac}"
    if roll < 0.98:
        return f"{value:,.2f}"
    return "n/a"


def generate_collection_rows(rows: int, seed: int = 42) -> pd.DataFrame:
    """Generate a DataFrame of synthetic collection rows.

    Args:
        rows: Number of data rows to generate
        seed: Random seed for reproducible data

    Returns:
        DataFrame whose columns are HEADERS
    """
    rng = np.random.default_rng(seed)
    days = pd.date_range("2024-01-01", "2024-12-31", freq="D")

    data: dict[str, list[Any]] = {h: [] for h in HEADERS}
    for _ in range(rows):
        day = days[int(rng.integers(0, len(days)))]
        data["Date"].append(day.to_pydatetime() if rng.random() < 0.9 else day.strftime("%d/%m/%y"))
        data["Code client"].append(f"C{int(rng.integers(1, 500)):04d}" if rng.random() < 0.98 else None)
        data["Montant"].append(_amount(rng))
        data["No.CHq /Bd"].append(_cheque_or_due_date(rng, day))
        data["Banque"].append(str(rng.choice(BANKS)))
        data["N° Facture"].append(f"F-{int(rng.integers(10_000, 99_999))}" if rng.random() < 0.6 else None)
        data["Nb jours"].append(int(rng.integers(30, 120)) if rng.random() < 0.4 else None)
        data["Taux"].append(round(float(rng.uniform(3, 9)), 2) if rng.random() < 0.4 else None)
        data["Interets"].append(round(float(rng.uniform(10, 5_000)), 2) if rng.random() < 0.4 else None)
        data["Commission"].append(round(float(rng.uniform(5, 200)), 2) if rng.random() < 0.3 else None)
        data["Remarque"].append("regle" if rng.random() < 0.1 else None)
    return pd.DataFrame(data, columns=HEADERS)


def create_collection_workbook(
    output_path: Path,
    rows: int,
    sheets: list[str] | None = None,
    seed: int = 42,
) -> None:
    """Write a workbook with one collection sheet per sheet name."""
    if sheets is None:
        sheets = ["Encaissements"]

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for offset, sheet_name in enumerate(sheets):
            df = generate_collection_rows(rows, seed + offset)
            df.to_excel(writer, sheet_name=sheet_name, index=False)

    print(f"Created collection workbook: {output_path}")
    print(f"  Sheets: {len(sheets)} ({', '.join(sheets)})")
    print(f"  Rows per sheet: {rows} (+ 1 header row)")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic bank collection workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 1,000 rows in one sheet
  %(prog)s data/sample.xlsx

  # Throughput check
  %(prog)s data/large.xlsx --rows 50000 --sheets Janvier Fevrier
        """,
    )
    parser.add_argument("output", type=Path, help="Output workbook path")
    parser.add_argument("--rows", type=int, default=1_000, help="Data rows per sheet (default: 1,000)")
    parser.add_argument("--sheets", nargs="+", default=["Encaissements"], help="Sheet names")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    try:
        create_collection_workbook(args.output, args.rows, args.sheets, args.seed)
    except OSError as e:
        print(f"Error generating workbook: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
