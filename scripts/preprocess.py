"""
Build the assistant's FAQ document from a spreadsheet.

Input: one or more .xlsx / .csv files, one row per question, with columns
  category, question, answer            (required)
  source, keywords, category_keywords   (optional; keywords are comma separated)

Rows sharing a category are grouped in first-seen order. Category keywords are
collected from every row of the category.

Output JSON (a list of categories):
[
  {"title": str, "keywords": [str], "qa": [{"q": str, "a": str, "source"?: str, "keywords": [str]}]}
]

Usage:
  python scripts/preprocess.py --input_dir data/sheets --output data/faq.json
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, List

import pandas as pd

REQUIRED_COLUMNS = ("category", "question", "answer")


def _to_str(x: object) -> str:
    if x is None:
        return ""
    if isinstance(x, float) and pd.isna(x):
        return ""
    return str(x).strip()


def _split_keywords(x: object) -> List[str]:
    return [part.strip() for part in _to_str(x).split(",") if part.strip()]


def read_sheet(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path)
    else:
        df = pd.read_excel(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name}: missing columns {', '.join(missing)}")
    return df


def build_categories(frames: List[pd.DataFrame]) -> List[Dict]:
    categories: Dict[str, Dict] = {}
    for df in frames:
        for _, row in df.iterrows():
            title = _to_str(row.get("category"))
            question = _to_str(row.get("question"))
            answer = _to_str(row.get("answer"))
            # Rows without a question or answer would be dropped by the loader anyway.
            if not title or not question or not answer:
                continue

            category = categories.setdefault(title, {"title": title, "keywords": [], "qa": []})
            for kw in _split_keywords(row.get("category_keywords")):
                if kw not in category["keywords"]:
                    category["keywords"].append(kw)

            item: Dict = {"q": question, "a": answer, "keywords": _split_keywords(row.get("keywords"))}
            source = _to_str(row.get("source"))
            if source:
                item["source"] = source
            category["qa"].append(item)
    return list(categories.values())


def main() -> None:
    parser = argparse.ArgumentParser(description="Convert FAQ spreadsheets to the assistant's JSON document.")
    parser.add_argument("--input_dir", default="data/sheets", help="Directory containing .xlsx/.csv files")
    parser.add_argument("--output", default="data/faq.json", help="Output JSON file path")
    args = parser.parse_args()

    input_dir = Path(args.input_dir)
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    sheets = sorted(p for p in input_dir.iterdir() if p.is_file() and p.suffix.lower() in {".xlsx", ".csv"}) if input_dir.is_dir() else []
    if not sheets:
        print(f"No .xlsx or .csv files found in {input_dir}")
        return

    categories = build_categories([read_sheet(p) for p in sheets])
    with output_path.open("w", encoding="utf-8") as w:
        json.dump(categories, w, ensure_ascii=False, indent=2)
        w.write("\n")

    total = sum(len(c["qa"]) for c in categories)
    print(f"Wrote {total} questions in {len(categories)} categories to {output_path}")


if __name__ == "__main__":
    main()
