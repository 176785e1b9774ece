"""Flat namespace of the dashboard helpers used by the page scripts."""

from clinical_utils import (
    Range,
    age_from_dob,
    bmi,
    dosage_link,
    fmt_dmy,
    get_param,
    in_age_group,
    in_target_for_row,
    in_therapeutic_range_c0,
    parse_dmy,
    parse_range,
)
from csv_loader import Row, RowCache, load_csv
from pgx_phenotypes import Badge, badge_class, pheno_abcb1, pheno_badge, pheno_cyp3a4, pheno_cyp3a5

__all__ = [
    "Badge",
    "Range",
    "Row",
    "RowCache",
    "age_from_dob",
    "badge_class",
    "bmi",
    "dosage_link",
    "fmt_dmy",
    "get_param",
    "in_age_group",
    "in_target_for_row",
    "in_therapeutic_range_c0",
    "load_csv",
    "parse_dmy",
    "parse_range",
    "pheno_abcb1",
    "pheno_badge",
    "pheno_cyp3a4",
    "pheno_cyp3a5",
]
