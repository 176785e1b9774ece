"""Star-allele genotype interpretation for the tacrolimus panel.

CYP3A5, CYP3A4 and ABCB1 genotypes such as ``"*1/*3"`` map to fixed
phenotype labels; unrecognized genotypes fall back to the functional label.
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Final, NamedTuple

CYP3A5_EXPRESSER: Final = "Expresser (functional)"
CYP3A5_NON_EXPRESSER: Final = "Non-expresser (loss-of-function)"

CYP3A4_PHENOTYPES: Final[dict[str, str]] = {
    "*22/*22": "Markedly reduced (*22/*22)",
    "*1/*22": "Reduced (*1/*22)",
    "*22/*1": "Reduced (*1/*22)",
}
CYP3A4_DEFAULT: Final = "Normal (*1/*1)"

ABCB1_PHENOTYPES: Final[dict[str, str]] = {
    "*2/*2": "P-gp low (higher absorption)",
    "*1/*2": "P-gp intermediate",
    "*2/*1": "P-gp intermediate",
}
ABCB1_DEFAULT: Final = "P-gp high (lower absorption)"

# Checked in order; the first matching pattern decides the tier.
_BADGE_RULES: Final[list[tuple[re.Pattern[str], str]]] = [
    (re.compile(r"Markedly|low \(higher"), "danger"),
    (re.compile(r"Reduced|intermediate"), "warning"),
    (re.compile(r"Normal|Expresser|high \(lower"), "success"),
]

_WHITESPACE_RE = re.compile(r"\s")


class Badge(NamedTuple):
    text: str
    tier: str


def _compact(genotype: Any) -> str:
    return _WHITESPACE_RE.sub("", str(genotype or ""))


def pheno_cyp3a5(genotype: Any) -> str:
    # Any *1 allele gives a functional enzyme.
    return CYP3A5_EXPRESSER if "*1" in _compact(genotype) else CYP3A5_NON_EXPRESSER


def pheno_cyp3a4(genotype: Any) -> str:
    return CYP3A4_PHENOTYPES.get(_compact(genotype), CYP3A4_DEFAULT)


def pheno_abcb1(genotype: Any) -> str:
    return ABCB1_PHENOTYPES.get(_compact(genotype), ABCB1_DEFAULT)


PHENOTYPERS: Final[dict[str, Callable[[Any], str]]] = {
    "CYP3A5": pheno_cyp3a5,
    "CYP3A4": pheno_cyp3a4,
    "ABCB1": pheno_abcb1,
}


def pheno_badge(label: Any) -> Badge:
    if not label or (isinstance(label, float) and math.isnan(label)):
        return Badge("–", "neutral")
    text = str(label)
    for pattern, tier in _BADGE_RULES:
        if pattern.search(text):
            return Badge(text, tier)
    return Badge(text, "neutral")


def badge_class(tier: str) -> str:
    mapping = {
        "danger": "text-bg-danger",
        "warning": "text-bg-warning",
        "success": "text-bg-success",
        "neutral": "text-bg-secondary",
    }
    return mapping.get(tier, "text-bg-secondary")
