"""
================================================================================
Lightning Label Locators
================================================================================

Locators derived from the visible label of a Lightning field, list or record
title, instead of generated ids that change between releases.

    - xpath_literal(): quote any text safely for use inside an XPath
    - title(), list_title(), field_value(), ...: one Locator per Lightning
      layout pattern
    - LabelLocator: tries the layout variants of a field in order (current
      Lightning form, then the older Aura form) and records when a fallback
      had to be used

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from .driver import DriverCapability, DriverError, ErrorKind, Locator


ACTIVE_CONTENT = "//div[@class='windowViewMode-normal oneContent active lafPageHost']"
TOAST_MESSAGE = Locator.xpath("//span[contains(@class,'toastMessage')]", "Toast message")
ERROR_MESSAGE = Locator.xpath(
    "//div[contains(@class,'forceFormPageError') or contains(@class,'genericNotification')]",
    "Error message",
)


def xpath_literal(text: str) -> str:
    """
    Quote ``text`` as an XPath string literal.

    Text holding both quote characters becomes a concat() expression:
        Her Majesty's "Treasury" -> concat('Her Majesty',"'",'s "Treasury"')
    """
    if "'" not in text:
        return f"'{text}'"
    if '"' not in text:
        return f'"{text}"'
    parts = text.split("'")
    return "concat(" + ",\"'\",".join(f"'{part}'" for part in parts) + ")"


def title(text: str) -> Locator:
    """Record page heading."""
    return Locator.xpath(f"{ACTIVE_CONTENT}//h1/div[text()={xpath_literal(text)}]", f"Title '{text}'")


def list_title(text: str) -> Locator:
    """Breadcrumb of a list view."""
    return Locator.xpath(f"//lst-breadcrumbs//div//span[text()={xpath_literal(text)}]", f"List title '{text}'")


def field_value(label: str) -> Locator:
    """Read-only output of a record field."""
    return Locator.xpath(
        f"//div/div/div/span[text()={xpath_literal(label)}]"
        "/../../div[2]/span//*[@data-output-element-id='output-field']",
        f"Value of '{label}'",
    )


def field_link(label: str) -> Locator:
    return Locator.xpath(
        f"//div/div/div/span[text()={xpath_literal(label)}]/../../div[2]//div//a",
        f"Link of '{label}'",
    )


def checkbox_value(label: str) -> Locator:
    return Locator.xpath(
        "//span[@class='slds-form-element__label slds-assistive-text']"
        f"[contains(text(),{xpath_literal(label)})]/../..//label/span[@class='slds-checkbox_faux']",
        f"Checkbox '{label}'",
    )


def related_list_heading(name: str) -> Locator:
    return Locator.xpath(f"{ACTIVE_CONTENT}//h2/a/span[@title={xpath_literal(name)}]", f"Related list '{name}'")


def button(name: str) -> Locator:
    return Locator.xpath(f"{ACTIVE_CONTENT}//button[text()={xpath_literal(name)}]", f"Button '{name}'")


# Field editors: current Lightning layout first, Aura layout second
_EDIT_VARIANTS: Dict[str, List[Tuple[str, str, str]]] = {
    "text": [
        ("lightning", "//label[@class='slds-form-element__label slds-no-flex'][contains(text(),{label})]", "/../..//input"),
        ("aura", "//label[@data-aura-class='uiLabel']//span[text()={label}]", "/../..//input"),
    ],
    "textarea": [
        ("lightning", "//*[@class='slds-form-element__label'][contains(text(),{label})]", "/../..//textarea"),
        ("aura", "//label[@data-aura-class='uiLabel']//span[text()={label}]", "/../..//textarea"),
    ],
    "date": [
        ("lightning", "//label[@class='slds-form-element__label'][text()={label}]", "/..//input"),
        ("aura", "//label[@data-aura-class='uiLabel']//span[text()={label}]", "/../..//input"),
    ],
    "lookup": [
        ("lightning", "//label[contains(text(),{label})]", "/../..//input"),
    ],
    "checkbox": [
        ("lightning", "//label[@class='slds-checkbox__label']//span[text()={label}]", "/../..//input"),
    ],
    "picklist": [
        ("lightning", "//*[@class='slds-form-element__label'][contains(text(),{label})]", ""),
        ("aura", "//span[@data-aura-class='uiPicklistLabel']//span[text()={label}]", "/../..//a"),
    ],
}


@dataclass
class LocatorHealth:
    """
    Which variant resolved a labelled field.

    Attributes:
        element_name: Label of the field
        primary_selector: Selector of the preferred variant
        used_fallback: Whether a later variant matched
        fallback_name: Name of the variant used, if a fallback
        fallback_selector: Selector of the variant used, if a fallback
    """
    element_name: str
    primary_selector: str
    used_fallback: bool = False
    fallback_name: Optional[str] = None
    fallback_selector: Optional[str] = None


class LabelLocator:
    """
    A field editor located by its label across Lightning layout variants.

    Usage:
        >>> name = LabelLocator("Account Name", kind="text")
        >>> element = name.resolve(driver)
        >>> name.health.used_fallback
        False
    """

    def __init__(self, label: str, kind: str = "text"):
        if kind not in _EDIT_VARIANTS:
            raise ValueError(f"Unknown field kind {kind!r}, expected one of {sorted(_EDIT_VARIANTS)}")
        self.label = label
        self.kind = kind
        self.variants: List[Tuple[str, Locator]] = [
            (name, Locator.xpath(begin.format(label=xpath_literal(label)) + end, f"{kind} field '{label}'"))
            for name, begin, end in _EDIT_VARIANTS[kind]
        ]
        self.health = LocatorHealth(element_name=label, primary_selector=self.variants[0][1].selector)

    @property
    def primary(self) -> Locator:
        return self.variants[0][1]

    def resolve(self, driver: DriverCapability) -> Any:
        """
        First element matched by any variant.

        Raises:
            DriverError: NO_SUCH_ELEMENT when no variant matches
        """
        for index, (name, locator) in enumerate(self.variants):
            elements = driver.find_elements(locator)
            if not elements:
                continue
            if index > 0:
                self.health.used_fallback = True
                self.health.fallback_name = name
                self.health.fallback_selector = locator.selector
                logger.warning(f"Field '{self.label}' found with fallback layout '{name}'")
            return elements[0]
        raise DriverError(
            ErrorKind.NO_SUCH_ELEMENT,
            f"No {self.kind} field labelled '{self.label}' in any known layout",
        )


__all__ = [
    "TOAST_MESSAGE",
    "ERROR_MESSAGE",
    "xpath_literal",
    "title",
    "list_title",
    "field_value",
    "field_link",
    "checkbox_value",
    "related_list_heading",
    "button",
    "LocatorHealth",
    "LabelLocator",
]
