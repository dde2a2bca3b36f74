# FILE: linkedin_profile_pkg/selectors.py
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

SECTION_IDS = ("experience", "education", "projects", "skills")

DESKTOP_NAME_SELECTORS = ["h1"]
MOBILE_NAME_SELECTORS = [
    ".top-card-layout__title",
    "[data-test-id='hero-title']",
    ".profile-top-card__name",
    "h1",
]

PHOTO_SELECTOR = "div.pv-top-card--photo img"
LOCATION_SELECTOR = ".text-body-small.inline.t-black--light.break-words"
PRONOUN_SELECTOR = "span.text-body-small.v-align-middle"

# Inside a section list item
LINK_TEXT_SELECTOR = 'div.hoverable-link-text span[aria-hidden="true"]'
BOLD_TEXT_SELECTOR = '.t-bold span[aria-hidden="true"]'
META_SELECTOR = "span.t-14.t-normal:not(.t-black--light)"
ANY_META_SELECTOR = "span.t-14.t-normal"
LIGHT_META_SELECTOR = "span.t-14.t-normal.t-black--light"
DESCRIPTION_SELECTOR = ".inline-show-more-text--is-collapsed"
SKILL_SELECTOR = 'div.hoverable-link-text span[aria-hidden="true"], div.t-bold span[aria-hidden="true"]'


def name_selectors(mobile: bool) -> List[str]:
    return MOBILE_NAME_SELECTORS if mobile else DESKTOP_NAME_SELECTORS


def primary_marker(mobile: bool) -> str:
    """Selector whose presence means the profile's top card rendered."""
    return ", ".join(name_selectors(mobile))


def find_section(soup: BeautifulSoup, anchor_id: str) -> Optional[Tag]:
    """Locate a profile section through the id anchor rendered inside it.

    LinkedIn's class names churn, but each card keeps a small anchor element
    (`<div id="experience">`) inside its `<section>`.
    """
    anchor = soup.find(id=anchor_id)
    if anchor is None:
        return None
    section = anchor.find_parent("section")
    return section


def section_items(section: Tag) -> List[Tag]:
    """Top-level list items of a section card, in document order."""
    return section.select(":scope > div ul > li")


def first_text(root: Tag, selector: str) -> str:
    el = root.select_one(selector)
    return clean_text(el) if el is not None else ""


def nth_text(root: Tag, selector: str, index: int) -> str:
    found = root.select(selector)
    if len(found) <= index:
        return ""
    return clean_text(found[index])


def clean_text(el: Tag) -> str:
    """Visible text of a node, preferring its aria-hidden copy.

    LinkedIn renders most strings twice (`aria-hidden` plus a
    `visually-hidden` duplicate for screen readers).
    """
    if el.get("aria-hidden") != "true":
        hidden = el.select_one('span[aria-hidden="true"]')
        if hidden is not None:
            el = hidden
    return " ".join(el.get_text(" ", strip=True).split())


# Collects only the fragments the parser reads, instead of serializing the
# whole document over the automation protocol.
SNAPSHOT_SCRIPT = """
({selectors, sectionIds}) => {
  const parts = [];
  for (const sel of selectors) {
    const el = document.querySelector(sel);
    if (el) parts.push(el.outerHTML);
  }
  for (const id of sectionIds) {
    const anchor = document.getElementById(id);
    const section = anchor ? anchor.closest('section') : null;
    if (section) parts.push(section.outerHTML);
  }
  return '<html><body>' + parts.join('\\n') + '</body></html>';
}
"""


def snapshot_selectors(mobile: bool) -> List[str]:
    return [primary_marker(mobile), PHOTO_SELECTOR, LOCATION_SELECTOR, PRONOUN_SELECTOR]
