"""
Legal citation formatting and the per-run citation registry.

Case:    "{case_name}, {volume} {reporter} {page}[, {pin_cite}] ({court} {year})"
Statute: "{code} § {section}[ ({year})]"

The court is left out of the parenthetical when the reporter already
identifies it (U.S. Supreme Court reporters, and state supreme court series
such as Cal.2d or Cal.4th), or when no court is given.

Known limitations:
- parallel or multiple reporters for one case are not supported
- prior and subsequent procedural history is not rendered
- short-form citations ("Id.", "supra") are not generated
- introductory signals ("See", "Cf.") are not rendered
- string citations combining several cases are not supported
- duplicates are detected by formatted-string equality, so two citations to
  the same case that differ only by pin cite are kept as separate entries
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from logger import logger

SUPREME_COURT_REPORTERS = ("U.S.", "S.Ct.", "L.Ed.", "L.Ed.2d")

# State supreme court series: a capitalized abbreviation followed by a
# numbered series suffix (Cal.2d, Cal.3d, Cal.4th). Cal.App.4th does not match.
STATE_SUPREME_REPORTER_PATTERN = re.compile(r"^[A-Z][a-z]+\.\d(?:d|[a-z]{2})$")

COURT_ABBREVIATIONS = {
    # Federal Courts of Appeals
    "1st_cir": "1st Cir.",
    "2nd_cir": "2d Cir.",
    "3rd_cir": "3d Cir.",
    "4th_cir": "4th Cir.",
    "5th_cir": "5th Cir.",
    "6th_cir": "6th Cir.",
    "7th_cir": "7th Cir.",
    "8th_cir": "8th Cir.",
    "9th_cir": "9th Cir.",
    "10th_cir": "10th Cir.",
    "11th_cir": "11th Cir.",
    "dc_cir": "D.C. Cir.",
    "fed_cir": "Fed. Cir.",
    # California Courts of Appeal
    "cal_app_1st": "Cal. Ct. App. 1st Dist.",
    "cal_app_2nd": "Cal. Ct. App. 2d Dist.",
    "cal_app_3rd": "Cal. Ct. App. 3d Dist.",
    "cal_app_4th": "Cal. Ct. App. 4th Dist.",
    "cal_app_5th": "Cal. Ct. App. 5th Dist.",
    "cal_app_6th": "Cal. Ct. App. 6th Dist.",
    # Federal District Courts (California)
    "cd_cal": "C.D. Cal.",
    "nd_cal": "N.D. Cal.",
    "ed_cal": "E.D. Cal.",
    "sd_cal": "S.D. Cal.",
    # Other
    "cal_super": "Cal. Super. Ct.",
    "ny_app_div": "N.Y. App. Div.",
    "tex_app": "Tex. App.",
}

REPORTER_ABBREVIATIONS = {
    "us": "U.S.",
    "sct": "S.Ct.",
    "led": "L.Ed.",
    "led2d": "L.Ed.2d",
    "f": "F.",
    "f2d": "F.2d",
    "f3d": "F.3d",
    "f4th": "F.4th",
    "fsupp": "F.Supp.",
    "fsupp2d": "F.Supp.2d",
    "fsupp3d": "F.Supp.3d",
    "cal": "Cal.",
    "cal2d": "Cal.2d",
    "cal3d": "Cal.3d",
    "cal4th": "Cal.4th",
    "cal5th": "Cal.5th",
    "calapp": "Cal.App.",
    "calapp2d": "Cal.App.2d",
    "calapp3d": "Cal.App.3d",
    "calapp4th": "Cal.App.4th",
    "calapp5th": "Cal.App.5th",
    "ny": "N.Y.",
    "ny2d": "N.Y.2d",
    "ny3d": "N.Y.3d",
    "sw": "S.W.",
    "sw2d": "S.W.2d",
    "sw3d": "S.W.3d",
    "ne": "N.E.",
    "ne2d": "N.E.2d",
    "ne3d": "N.E.3d",
}


def should_omit_court(reporter: str) -> bool:
    if reporter in SUPREME_COURT_REPORTERS:
        return True
    return bool(STATE_SUPREME_REPORTER_PATTERN.match(reporter or ""))


@dataclass(frozen=True)
class CaseCitation:
    case_name: str
    volume: int
    reporter: str
    page: int
    year: int
    court: Optional[str] = None
    pin_cite: Optional[Union[int, str]] = None

    kind = "case"

    def format(self) -> str:
        return format_case_citation(self)


@dataclass(frozen=True)
class StatuteCitation:
    code: str
    section: str
    year: Optional[int] = None

    kind = "statute"

    def format(self) -> str:
        return format_statute_citation(self)


Citation = Union[CaseCitation, StatuteCitation]


def format_case_citation(citation: CaseCitation) -> str:
    formatted = f"{citation.case_name}, {citation.volume} {citation.reporter} {citation.page}"
    if citation.pin_cite:
        formatted += f", {citation.pin_cite}"
    if citation.court and not should_omit_court(citation.reporter):
        formatted += f" ({citation.court} {citation.year})"
    else:
        formatted += f" ({citation.year})"
    return formatted


def format_statute_citation(citation: StatuteCitation) -> str:
    formatted = f"{citation.code} § {citation.section}"
    if citation.year:
        formatted += f" ({citation.year})"
    return formatted


def format_citation(citation: Citation) -> str:
    if isinstance(citation, CaseCitation):
        return format_case_citation(citation)
    if isinstance(citation, StatuteCitation):
        return format_statute_citation(citation)
    raise TypeError(f"Unsupported citation type: {type(citation).__name__}")


def is_valid_case_citation(citation: CaseCitation) -> bool:
    return bool(
        citation.case_name
        and citation.volume
        and citation.reporter
        and citation.page
        and citation.year
    )


def is_valid_statute_citation(citation: StatuteCitation) -> bool:
    return bool(citation.code and citation.section)


def extract_case_name(full_citation: str) -> str:
    """'Smith v. Jones, 123 F.3d 456 (1999)' → 'Smith v. Jones'"""
    name, _, _ = full_citation.partition(",")
    return name.strip()


class CitationRegistry:
    """
    Insertion-ordered, de-duplicated set of citations for one assembly run.
    Never shared between runs.
    """

    def __init__(self):
        self._citations = {}

    def register(self, citation: Citation):
        key = format_citation(citation)
        if key in self._citations:
            logger.debug(f"[CITATIONS] Duplicate citation ignored: {key}")
            return
        self._citations[key] = citation

    def all(self) -> list:
        return list(self._citations.values())

    def cases(self) -> list:
        return [c for c in self._citations.values() if c.kind == "case"]

    def statutes(self) -> list:
        return [c for c in self._citations.values() if c.kind == "statute"]

    def to_table_of_authorities(self, include_heading: bool = True) -> str:
        """
        Cases first, then statutes. Insertion order is kept inside each group.
        """
        lines = ["# TABLE OF AUTHORITIES", ""] if include_heading else []
        for heading, group in (("Cases", self.cases()), ("Statutes", self.statutes())):
            if not group:
                continue
            lines.append(f"## {heading}")
            lines.append("")
            lines.extend(f"- {c.format()}" for c in group)
            lines.append("")
        return "\n".join(lines).strip()

    def __len__(self):
        return len(self._citations)

    def __bool__(self):
        return bool(self._citations)

    def __iter__(self):
        return iter(self.all())
