"""
Jurisdiction rule sets keyed by two-letter code.

Each JurisdictionRules bundles the data the validator and the templated
assembly path need: required sections, templates, advisory sections,
content heuristics, section titles and emit order, the authorities each
section cites, and a proof-of-service checklist. Supporting a new
jurisdiction means registering another JurisdictionRules; neither the
validator nor the assembler branch on the code.
"""

import re
from functools import lru_cache
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from logger import logger


@dataclass(frozen=True)
class SectionCheck:
    """Advisory content heuristic: `pattern` must appear in `section_key`."""
    section_key: str
    pattern: str
    message: str
    ignore_case: bool = False

    def passes(self, content: str) -> bool:
        flags = re.IGNORECASE if self.ignore_case else 0
        return re.search(self.pattern, content or "", flags) is not None


def _readonly(mapping) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class JurisdictionRules:
    code: str
    name: str
    required_elements: Tuple[str, ...]
    templates: Mapping[str, str]
    advisory_sections: Mapping[str, str] = field(default_factory=dict)
    section_checks: Tuple[SectionCheck, ...] = ()
    section_titles: Mapping[str, str] = field(default_factory=dict)
    emit_order: Tuple[str, ...] = ()
    section_authorities: Mapping[str, tuple] = field(default_factory=dict)
    narrative_authorities: tuple = ()
    demand_label: str = "demand"
    legal_risks: Tuple[str, ...] = ()
    description: str = ""
    service_checklist: Optional[Callable[[dict], list]] = None
    template_data: Optional[Callable] = None

    def __post_init__(self):
        object.__setattr__(self, "code", self.code.upper())
        object.__setattr__(self, "required_elements", tuple(self.required_elements))
        object.__setattr__(self, "templates", _readonly(self.templates))
        object.__setattr__(self, "advisory_sections", _readonly(self.advisory_sections))
        object.__setattr__(self, "section_checks", tuple(self.section_checks))
        object.__setattr__(self, "section_titles", _readonly(self.section_titles))
        object.__setattr__(self, "emit_order", tuple(self.emit_order or self.templates.keys()))
        object.__setattr__(self, "section_authorities", _readonly(self.section_authorities))

    def title_for(self, section_key: str) -> str:
        return self.section_titles.get(section_key, section_key.replace("_", " ").upper())


class JurisdictionRegistry:
    """
    Immutable code → JurisdictionRules lookup. `register` returns a new
    registry, so a test can extend the defaults without touching them.
    """

    def __init__(self, rules=()):
        self._rules = MappingProxyType({r.code: r for r in rules})

    def get(self, code: str) -> Optional[JurisdictionRules]:
        if not code:
            return None
        return self._rules.get(str(code).strip().upper())

    def register(self, rules: JurisdictionRules) -> "JurisdictionRegistry":
        if rules.code in self._rules:
            logger.info(f"[JURISDICTIONS] Replacing rules for {rules.code}")
        merged = dict(self._rules)
        merged[rules.code] = rules
        return JurisdictionRegistry(merged.values())

    def codes(self) -> list:
        return list(self._rules.keys())

    def __contains__(self, code) -> bool:
        return self.get(code) is not None

    def __len__(self):
        return len(self._rules)


@lru_cache(maxsize=1)
def build_default_registry() -> JurisdictionRegistry:
    from legal.ca_demand_pack import build_ca_rules

    return JurisdictionRegistry([build_ca_rules()])


GENERIC_SERVICE_CHECKLIST = (
    {
        "item": "Service Method Documented",
        "required": True,
        "description": "Document method of service (certified mail, personal service, etc.)",
    },
    {
        "item": "Service Date Recorded",
        "required": True,
        "description": "Record exact date and time demand was served",
    },
    {
        "item": "Proof of Delivery Obtained",
        "required": True,
        "description": "Obtain confirmation of delivery and signature if applicable",
    },
)


def build_service_checklist(code: str, case_info: dict = None,
                            registry: JurisdictionRegistry = None) -> list:
    """
    Proof-of-service checklist for a jurisdiction. Jurisdictions without
    their own checklist get the generic three-item list.
    """
    if registry is None:
        registry = build_default_registry()
    rules = registry.get(code)
    if rules and rules.service_checklist:
        return rules.service_checklist(case_info or {})
    return [dict(item) for item in GENERIC_SERVICE_CHECKLIST]
