# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "polars",
#     "requests",
# ]
# ///

from __future__ import annotations

import argparse
import asyncio
from datetime import date
from pathlib import Path
from typing import Any, Sequence

from polars.exceptions import PolarsError

from clinical_utils import (
    TARGET_RANGE_COLUMN,
    TROUGH_C0_COLUMN,
    age_from_dob,
    bmi,
    dosage_link,
    fmt_dmy,
    get_param,
    in_age_group,
    in_target_for_row,
    in_therapeutic_range_c0,
    parse_dmy,
)
from csv_loader import Row, load_csv
from pgx_phenotypes import PHENOTYPERS, pheno_badge
from run_utils import resolve_base_name, run_root, update_summary, write_json

PATIENT_ID_COLUMN = "Patient ID"
DOB_COLUMN = "DOB"
WEIGHT_COLUMN = "Weight (kg)"
HEIGHT_COLUMN = "Height (cm)"
GENOTYPE_COLUMNS: dict[str, str] = {
    "CYP3A5": "CYP3A5 Genotype",
    "CYP3A4": "CYP3A4 Genotype",
    "ABCB1": "ABCB1 Genotype",
}
OUTPUT_NAME = "patient_overview.json"


def _phenotype(gene: str, genotype: Any) -> str | None:
    # No genotype on file is not the same as a normal genotype.
    if genotype is None:
        return None
    return PHENOTYPERS[gene](genotype)


def summarize_row(row: Row, today: date | None = None) -> dict[str, Any]:
    patient_id = row.get(PATIENT_ID_COLUMN)
    dob = row.get(DOB_COLUMN)
    c0 = row.get(TROUGH_C0_COLUMN)
    phenotypes = {
        gene: _phenotype(gene, row.get(column)) for gene, column in GENOTYPE_COLUMNS.items()
    }
    return {
        "patient_id": patient_id,
        "dob": fmt_dmy(parse_dmy(dob)),
        "age": age_from_dob(dob, today),
        "bmi": bmi(row.get(WEIGHT_COLUMN), row.get(HEIGHT_COLUMN)),
        "c0": c0,
        "target_range": row.get(TARGET_RANGE_COLUMN),
        "in_target": in_target_for_row(row),
        "in_reference_range": in_therapeutic_range_c0(c0),
        "phenotypes": phenotypes,
        "badges": {gene: list(pheno_badge(label)) for gene, label in phenotypes.items()},
        "dosage_link": dosage_link(patient_id) if patient_id is not None else None,
    }


def filter_summaries(
    summaries: list[dict[str, Any]],
    age_group: str | None = None,
    patient_id: str | None = None,
) -> list[dict[str, Any]]:
    selected: list[dict[str, Any]] = []
    for summary in summaries:
        if age_group and not in_age_group(summary["age"], age_group):
            continue
        if patient_id is not None and str(summary["patient_id"]) != patient_id:
            continue
        selected.append(summary)
    return selected


def _target_status(in_target: bool | None) -> str:
    if in_target is None:
        return "no target"
    return "in target" if in_target else "out of target"


def _format_line(summary: dict[str, Any]) -> str:
    age = summary["age"] if summary["age"] is not None else "NA"
    badges = ", ".join(f"{gene} {text}" for gene, (text, _tier) in summary["badges"].items())
    return (
        f"{summary['patient_id']}: age {age}, BMI {summary['bmi'] or 'NA'}, "
        f"C0 {summary['c0'] if summary['c0'] is not None else 'NA'} "
        f"({_target_status(summary['in_target'])}) | {badges}"
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Summarize a transplant patient CSV for the dashboard.")
    parser.add_argument("source", help="CSV path or http(s) URL")
    parser.add_argument("--age-group", help='Only include ages in this group, e.g. "30-49" or "70+"')
    parser.add_argument("--page-url", help="Dashboard page address; its ?patient= value selects one patient")
    parser.add_argument("--runs-dir", default="runs", help="Root folder for run outputs")
    parser.add_argument("--run-date", help="Run date in YYYYMMDD (defaults to today)")
    args = parser.parse_args(argv)

    print(f"Loading patients from {args.source}...")
    try:
        rows = asyncio.run(load_csv(args.source))
    except (OSError, PolarsError) as exc:
        print(f"Error: unable to load {args.source}: {exc}")
        return 1

    summaries = [summarize_row(row) for row in rows]
    missing_ids = sum(1 for summary in summaries if summary["patient_id"] is None)
    if missing_ids:
        print(f"Warning: {missing_ids} row(s) without {PATIENT_ID_COLUMN!r}; dosage links skipped.")

    patient_id = get_param(args.page_url, "patient") if args.page_url else None
    selected = filter_summaries(summaries, args.age_group, patient_id)

    print("\n--- PATIENT OVERVIEW ---")
    for summary in selected:
        print(_format_line(summary))
    print(f"{len(selected)} of {len(summaries)} patient(s) shown")
    print("------------------------\n")

    run_dir = run_root(resolve_base_name(args.source), args.run_date, Path(args.runs_dir))
    output_path = run_dir / OUTPUT_NAME
    payload = {
        "source": args.source,
        "age_group": args.age_group,
        "patient": patient_id,
        "patients": selected,
    }
    write_json(output_path, payload)
    update_summary(run_dir, {"patient_overview_path": str(output_path), "patient_count": len(selected)})
    print(f"Wrote {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
