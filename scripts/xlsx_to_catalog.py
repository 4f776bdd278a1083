#!/usr/bin/env python3
"""
Convert the species spreadsheet into the catalog JSON (without embeddings).
- Reads sheet "1 Partes usadas, atributos"
- The "Ecosystem Service" column and the two columns after it hold "X" marks;
  their header-row values are the service names
- Parts used are split and translated to English (see sylva.sheet)
"""
import argparse, json, os, logging

import pandas as pd

from sylva.sheet import SHEET_NAME, rows_to_catalog

logging.basicConfig(level=logging.INFO, format="%(message)s", force=True)
logger = logging.getLogger(__name__)


def convert(xlsx_path: str, out_path: str) -> int:
    if not os.path.exists(xlsx_path):
        raise FileNotFoundError(f"Spreadsheet not found: {xlsx_path}")
    sheets = pd.ExcelFile(xlsx_path).sheet_names
    sheet = next((s for s in sheets if s.strip() == SHEET_NAME), None)
    if sheet is None:
        raise ValueError(f'Sheet "{SHEET_NAME}" not found.')

    df = pd.read_excel(xlsx_path, sheet_name=sheet, dtype=str).fillna("")
    cols = list(df.columns)
    if "Ecosystem Service" not in cols:
        raise ValueError('Missing "Ecosystem Service" column')
    start = cols.index("Ecosystem Service")
    service_columns = cols[start:start + 3]

    data = rows_to_catalog(df.to_dict(orient="records"), service_columns=service_columns)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return len(data)


def main():
    ap = argparse.ArgumentParser(description="Export the species spreadsheet to catalog JSON.")
    ap.add_argument("--xlsx", default=os.path.join(os.getenv("SYLVA_ASSETS_PATH") or "assets", "data.xlsx"))
    ap.add_argument("--out", default=os.path.join(os.getenv("SYLVA_ASSETS_PATH") or "assets", "data.json"))
    args = ap.parse_args()
    n = convert(args.xlsx, args.out)
    logger.info(f"Exported {n} rows to {args.out}")


if __name__ == "__main__":
    main()
