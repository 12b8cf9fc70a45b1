"""
Source-document addressing: inline citation chips, viewer deep links and
Bates numbering.

A chip points a factual assertion at an exact place in the record, e.g.
"[Bates 0023, L7–L19]". The same anchor serialises to a viewer query string
(doc, exhibit, bates, batesEnd, page, pageEnd, hl) that the document viewer
uses to open the page and highlight the lines.
"""

import html
import re
from dataclasses import dataclass, asdict
from typing import Optional
from urllib.parse import urlencode, parse_qs

from core.constants import DEFAULT_VIEWER_BASE_URL
from core.error_handling import InvalidAnchorError, InvalidBatesRangeError
from logger import logger

EN_DASH = "–"
HIGHLIGHT_PATTERN = re.compile(r"L(\d+)(?:-L(\d+))?")
TRAILING_DIGITS_PATTERN = re.compile(r"(\d+)$")
BATES_PATTERN = re.compile(r"^([A-Z]+)-(\d+)$")

# Query keys in wire order
QUERY_KEYS = ("doc", "exhibit", "bates", "batesEnd", "page", "pageEnd", "hl")


@dataclass(frozen=True)
class SourceAnchor:
    bates_start: Optional[str] = None
    bates_end: Optional[str] = None
    page: Optional[int] = None
    page_end: Optional[int] = None
    line_start: Optional[int] = None
    line_end: Optional[int] = None
    exhibit_id: Optional[str] = None
    document_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class InlineCite:
    label: str
    anchor: SourceAnchor


_ANCHOR_KEY_ALIASES = {
    "bates": "bates_start",
    "batesstart": "bates_start",
    "bates_start": "bates_start",
    "batesend": "bates_end",
    "bates_end": "bates_end",
    "page": "page",
    "pageend": "page_end",
    "page_end": "page_end",
    "linestart": "line_start",
    "line_start": "line_start",
    "lineend": "line_end",
    "line_end": "line_end",
    "exhibit": "exhibit_id",
    "exhibitid": "exhibit_id",
    "exhibit_id": "exhibit_id",
    "doc": "document_id",
    "documentid": "document_id",
    "document_id": "document_id",
}

_INT_FIELDS = ("page", "page_end", "line_start", "line_end")


def anchor_from_dict(data: dict) -> SourceAnchor:
    """
    Build an anchor from a loosely keyed record (snake_case or camelCase).
    Unknown keys are ignored.
    """
    if isinstance(data, SourceAnchor):
        return data
    kwargs = {}
    for key, value in (data or {}).items():
        name = _ANCHOR_KEY_ALIASES.get(str(key).lower())
        if not name or value is None or value == "":
            continue
        kwargs[name] = int(value) if name in _INT_FIELDS else str(value)
    return SourceAnchor(**kwargs)


def inline_cite_from_dict(data: dict) -> InlineCite:
    if isinstance(data, InlineCite):
        return data
    return InlineCite(label=str((data or {}).get("label") or "Source"), anchor=anchor_from_dict(data))


def is_valid_anchor(anchor: SourceAnchor) -> bool:
    return bool(
        anchor.bates_start
        or anchor.page is not None
        or anchor.exhibit_id
        or anchor.document_id
    )


def _line_part(start: int, end: Optional[int]) -> str:
    if end is not None and end != start:
        return f"L{start}{EN_DASH}L{end}"
    return f"L{start}"


def _page_part(anchor: SourceAnchor) -> str:
    if anchor.page_end is not None and anchor.page_end != anchor.page:
        return f"pp.{anchor.page}{EN_DASH}{anchor.page_end}"
    return f"p.{anchor.page}"


def render_chip(anchor: SourceAnchor) -> str:
    """
    Bracketed inline citation. Priority: Bates > Exhibit > Page.
    Line ranges are always appended when present.

    [Bates 0023, L7–L19]   [Ex. A, p.12]   [pp.23–24]
    """
    if not is_valid_anchor(anchor):
        raise InvalidAnchorError(details=str(anchor.to_dict()))

    parts = []
    if anchor.bates_start:
        if anchor.bates_end and anchor.bates_end != anchor.bates_start:
            parts.append(f"Bates {anchor.bates_start}{EN_DASH}{anchor.bates_end}")
        else:
            parts.append(f"Bates {anchor.bates_start}")
    elif anchor.exhibit_id:
        parts.append(f"Ex. {anchor.exhibit_id}")
        if anchor.page is not None:
            parts.append(_page_part(anchor))
    elif anchor.page is not None:
        parts.append(_page_part(anchor))

    if anchor.line_start is not None:
        parts.append(_line_part(anchor.line_start, anchor.line_end))

    if not parts:
        # Document-only anchors locate a file but no position inside it
        parts.append(f"Doc. {anchor.document_id}")

    return f"[{', '.join(parts)}]"


def to_query(anchor: SourceAnchor) -> str:
    """
    Viewer query string, keys in fixed order: doc, exhibit, bates, batesEnd,
    page, pageEnd, hl. hl is "L{start}-L{end}" when an end line is set,
    otherwise "L{start}". A line_end without a line_start has nothing to
    highlight from and is not written, so it does not survive parse_query.
    """
    params = []
    if anchor.document_id:
        params.append(("doc", anchor.document_id))
    if anchor.exhibit_id:
        params.append(("exhibit", anchor.exhibit_id))
    if anchor.bates_start:
        params.append(("bates", anchor.bates_start))
    if anchor.bates_end:
        params.append(("batesEnd", anchor.bates_end))
    if anchor.page is not None:
        params.append(("page", str(anchor.page)))
    if anchor.page_end is not None:
        params.append(("pageEnd", str(anchor.page_end)))
    if anchor.line_start is not None:
        if anchor.line_end is not None:
            params.append(("hl", f"L{anchor.line_start}-L{anchor.line_end}"))
        else:
            params.append(("hl", f"L{anchor.line_start}"))
    return urlencode(params)


def _parse_int(key: str, raw: str) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"[ANCHORS] Ignoring non-numeric {key}={raw!r} in viewer query")
        return None


def parse_query(query_string: str) -> SourceAnchor:
    """Inverse of to_query. A leading '?' is tolerated."""
    params = parse_qs((query_string or "").lstrip("?"), keep_blank_values=False)

    def first(key):
        values = params.get(key)
        return values[0] if values else None

    kwargs = {
        "document_id": first("doc"),
        "exhibit_id": first("exhibit"),
        "bates_start": first("bates"),
        "bates_end": first("batesEnd"),
    }
    if first("page") is not None:
        kwargs["page"] = _parse_int("page", first("page"))
    if first("pageEnd") is not None:
        kwargs["page_end"] = _parse_int("pageEnd", first("pageEnd"))

    highlight = first("hl")
    if highlight:
        match = HIGHLIGHT_PATTERN.search(highlight)
        if match:
            kwargs["line_start"] = int(match.group(1))
            if match.group(2):
                kwargs["line_end"] = int(match.group(2))

    return SourceAnchor(**kwargs)


def to_viewer_url(base_url: str, anchor: SourceAnchor) -> str:
    query = to_query(anchor)
    return f"{base_url}?{query}" if query else base_url


def render_clickable_chip(label: str, anchor: SourceAnchor, viewer_base_url: str) -> str:
    chip = render_chip(anchor)
    url = to_viewer_url(viewer_base_url, anchor)
    return (
        f'<a href="{html.escape(url, quote=True)}" class="cite-chip" '
        f'title="{html.escape(label or "", quote=True)}">{html.escape(chip)}</a>'
    )


def normalize_bates(raw: str, pad_width: int = 4) -> str:
    """
    Zero-pad the trailing digit run, keeping any prefix verbatim.
    normalize_bates("DEF-45", 6) → "DEF-000045"; no digits → unchanged.
    """
    match = TRAILING_DIGITS_PATTERN.search(raw or "")
    if not match:
        return raw
    digits = match.group(1)
    return raw[: match.start()] + digits.zfill(pad_width)


# === Bates numbering ===

@dataclass(frozen=True)
class BatesNumber:
    prefix: str
    number: int
    pad_width: int = 6

    def format(self) -> str:
        return f"{self.prefix}-{str(self.number).zfill(self.pad_width)}"

    def __str__(self):
        return self.format()


@dataclass(frozen=True)
class BatesRange:
    start: BatesNumber
    end: BatesNumber

    def __post_init__(self):
        if self.start.prefix != self.end.prefix:
            raise InvalidBatesRangeError(
                f"Bates range prefixes differ: {self.start.prefix} vs {self.end.prefix}"
            )
        if self.start.number > self.end.number:
            raise InvalidBatesRangeError(
                f"Bates range starts after it ends: {self.start} > {self.end}"
            )

    def format(self) -> str:
        return f"{self.start} to {self.end}"

    def __str__(self):
        return self.format()

    def __len__(self):
        return self.end.number - self.start.number + 1


def generate_bates_range(prefix: str, start: int, end: int, pad_width: int = 6) -> BatesRange:
    return BatesRange(BatesNumber(prefix, start, pad_width), BatesNumber(prefix, end, pad_width))


def parse_bates_number(raw: str) -> Optional[BatesNumber]:
    """'SMITH-000123' → BatesNumber('SMITH', 123, 6); None when not in PREFIX-digits form."""
    match = BATES_PATTERN.match(raw or "")
    if not match:
        return None
    digits = match.group(2)
    return BatesNumber(match.group(1), int(digits), len(digits))


def generate_document_bates_numbers(document_id: str, page_count: int, prefix: str,
                                    start_number: int, pad_width: int = 6) -> dict:
    """
    Stamp a sequential Bates number on every page of a document.
    """
    if page_count < 1:
        raise InvalidBatesRangeError(f"Document {document_id} has no pages to number")
    pages = [
        {"page_number": i + 1, "bates_number": BatesNumber(prefix, start_number + i, pad_width)}
        for i in range(page_count)
    ]
    return {
        "document_id": document_id,
        "pages": pages,
        "range": generate_bates_range(prefix, start_number, start_number + page_count - 1, pad_width),
    }


def format_source_citation(description: str, document_name: str, bates_range: str,
                           page_number: int = None) -> str:
    if page_number:
        return f"{description} ({document_name}, p. {page_number}, {bates_range})"
    return f"{description} ({document_name}, {bates_range})"


# === Common citation chip shapes ===

def medical_record(bates: str, page: int = None, line_start: int = None, line_end: int = None) -> InlineCite:
    return InlineCite("Medical Records", SourceAnchor(bates_start=bates, page=page,
                                                      line_start=line_start, line_end=line_end))


def deposition(witness_name: str, page: int, line_start: int = None, line_end: int = None) -> InlineCite:
    return InlineCite(f"Dep. of {witness_name}", SourceAnchor(page=page, line_start=line_start,
                                                              line_end=line_end))


def police_report(page: int, line_start: int = None) -> InlineCite:
    return InlineCite("Police Report", SourceAnchor(page=page, line_start=line_start))


def expert_report(expert_name: str, page: int) -> InlineCite:
    return InlineCite(f"Report of {expert_name}", SourceAnchor(page=page))


def exhibit(exhibit_id: str, page: int = None) -> InlineCite:
    return InlineCite(f"Exhibit {exhibit_id}", SourceAnchor(exhibit_id=exhibit_id, page=page))


CITE_PATTERNS = {
    "medical_record": medical_record,
    "deposition": deposition,
    "police_report": police_report,
    "expert_report": expert_report,
    "exhibit": exhibit,
}


# === Per-run anchor log ===

@dataclass(frozen=True)
class AnchorEntry:
    section_key: str
    label: str
    anchor: SourceAnchor
    chip: str

    def to_dict(self) -> dict:
        return {
            "section_key": self.section_key,
            "label": self.label,
            "anchor": self.anchor.to_dict(),
            "chip": self.chip,
            "query": to_query(self.anchor),
            "url": to_viewer_url(DEFAULT_VIEWER_BASE_URL, self.anchor),
        }


class AnchorLog:
    """
    Records every chip emitted during one assembly run so the caller can
    build a source index or link chips back to the viewer.
    """

    def __init__(self):
        self._entries = []

    def cite(self, section_key: str, cite: InlineCite) -> str:
        chip = render_chip(cite.anchor)
        self._entries.append(AnchorEntry(section_key, cite.label, cite.anchor, chip))
        return chip

    def entries(self) -> list:
        return list(self._entries)

    def for_section(self, section_key: str) -> list:
        return [e for e in self._entries if e.section_key == section_key]

    def __len__(self):
        return len(self._entries)
