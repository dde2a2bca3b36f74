import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page

from .errors import ExtractionError
from .heuristics import (
    dedupe,
    infer_gender,
    is_image_caption,
    parse_date_range,
    split_full_name,
    split_location,
    split_meta,
)
from .models import EducationExperience, ProfileRecord, ProjectExperience, WorkExperience
from .scraper_logging import get_logger
from .selectors import (
    ANY_META_SELECTOR,
    BOLD_TEXT_SELECTOR,
    DESCRIPTION_SELECTOR,
    LIGHT_META_SELECTOR,
    LINK_TEXT_SELECTOR,
    LOCATION_SELECTOR,
    META_SELECTOR,
    PHOTO_SELECTOR,
    PRONOUN_SELECTOR,
    SECTION_IDS,
    SKILL_SELECTOR,
    SNAPSHOT_SCRIPT,
    clean_text,
    find_section,
    first_text,
    name_selectors,
    nth_text,
    section_items,
    snapshot_selectors,
)

logger = get_logger("extraction")


class SectionStatus(enum.Enum):
    OK = "ok"
    PARTIALLY_FAILED = "partiallyFailed"


@dataclass
class SectionResult:
    """Outcome of parsing one profile section.

    A failed section carries an empty item list and the failure reason, so
    callers can tell "nothing there" from "could not read it".
    """
    name: str
    status: SectionStatus
    items: list = field(default_factory=list)
    reason: str = ""
    error: Optional[ExtractionError] = None

    @classmethod
    def ok(cls, name: str, items: list) -> "SectionResult":
        return cls(name=name, status=SectionStatus.OK, items=items)

    @classmethod
    def partially_failed(cls, name: str, error: ExtractionError) -> "SectionResult":
        return cls(name=name, status=SectionStatus.PARTIALLY_FAILED, reason=str(error), error=error)

    @property
    def failed(self) -> bool:
        return self.status is SectionStatus.PARTIALLY_FAILED


@dataclass
class ExtractionResult:
    record: ProfileRecord
    sections: Dict[str, SectionResult]

    @property
    def failed_sections(self) -> List[str]:
        return [name for name, result in self.sections.items() if result.failed]


@dataclass(frozen=True)
class TopCard:
    full_name: str = ""
    image_url: str = ""
    location: str = ""
    pronouns: str = ""


def _item_title(li: Tag) -> str:
    return first_text(li, LINK_TEXT_SELECTOR) or first_text(li, BOLD_TEXT_SELECTOR)


def parse_top_card(soup: BeautifulSoup, mobile: bool = False) -> TopCard:
    full_name = ""
    for selector in name_selectors(mobile):
        full_name = first_text(soup, selector)
        if full_name:
            break
    photo = soup.select_one(PHOTO_SELECTOR)
    return TopCard(
        full_name=full_name,
        image_url=(photo.get("src") or "") if photo is not None else "",
        location=first_text(soup, LOCATION_SELECTOR),
        pronouns=first_text(soup, PRONOUN_SELECTOR).lower(),
    )


def parse_experience(section: Tag, profile_location: str = "") -> List[WorkExperience]:
    items: List[WorkExperience] = []
    for li in section_items(section):
        job_title = _item_title(li)
        if not job_title:
            continue
        company, work_type = split_meta(first_text(li, META_SELECTOR))
        date_line = first_text(li, LIGHT_META_SELECTOR)
        dates = parse_date_range(date_line)
        items.append(
            WorkExperience(
                job_title=job_title,
                company_name=company,
                start_date=dates.start,
                end_date=dates.end,
                still_working=dates.ongoing,
                description=first_text(li, DESCRIPTION_SELECTOR),
                location=nth_text(li, LIGHT_META_SELECTOR, 1) or profile_location,
                work_type=work_type,
            )
        )
    return dedupe(items, key=lambda w: (w.job_title, w.company_name))


def parse_education(section: Tag, profile_location: str = "") -> List[EducationExperience]:
    items: List[EducationExperience] = []
    for li in section_items(section):
        college = _item_title(li)
        if not college:
            continue
        degree_line = first_text(li, META_SELECTOR)
        parts = [p.strip() for p in degree_line.split(",")] if degree_line else []
        course = parts[0] if parts else ""
        field_of_study = parts[1] if len(parts) > 1 else ""
        dates = parse_date_range(first_text(li, LIGHT_META_SELECTOR))
        items.append(
            EducationExperience(
                course_name=course,
                field=field_of_study,
                college_name=college,
                start_date=dates.start,
                end_date=dates.end,
                still_studying=dates.ongoing,
                description=degree_line,
                location=profile_location,
                education_type=course,
            )
        )
    return items


def parse_projects(section: Tag, profile_location: str = "") -> List[ProjectExperience]:
    items: List[ProjectExperience] = []
    for li in section_items(section):
        name = first_text(li, BOLD_TEXT_SELECTOR) or first_text(li, LINK_TEXT_SELECTOR)
        if not name or is_image_caption(name):
            continue
        dates = parse_date_range(first_text(li, ANY_META_SELECTOR))
        items.append(
            ProjectExperience(
                project_name=name,
                start_date=dates.start,
                end_date=dates.end,
                still_working=dates.ongoing,
                description=first_text(li, DESCRIPTION_SELECTOR),
            )
        )
    return dedupe(items, key=lambda p: p.project_name)


def parse_skills(section: Tag, profile_location: str = "") -> List[str]:
    names = [clean_text(el) for el in section.select(SKILL_SELECTOR)]
    return dedupe([n for n in names if n], key=lambda n: n)


SectionParser = Callable[[Tag, str], list]

SECTION_PARSERS: Dict[str, SectionParser] = {
    "experience": parse_experience,
    "education": parse_education,
    "projects": parse_projects,
    "skills": parse_skills,
}


def run_section(soup: BeautifulSoup, name: str, parser: SectionParser, profile_location: str) -> SectionResult:
    """Parse one section in isolation; a failure only empties that section."""
    try:
        section = find_section(soup, name)
        if section is None:
            return SectionResult.ok(name, [])
        return SectionResult.ok(name, parser(section, profile_location))
    except ExtractionError as e:
        error = e
    except Exception as e:
        error = ExtractionError(f"{name} section: {type(e).__name__}: {e}")
        error.__cause__ = e
    logger.warning("Failed to parse %s section: %s", name, error)
    return SectionResult.partially_failed(name, error)


def _worked_previously(experience: SectionResult) -> str:
    if experience.failed:
        return "unknown"
    return "yes" if experience.items else "no"


def _degree(education: List[EducationExperience]) -> str:
    if not education:
        return ""
    first = education[0]
    return first.course_name or first.education_type or first.field or ""


def extract_profile(
    html: str,
    profile_url: str = "",
    mobile: bool = False,
    scraped_at: Optional[str] = None,
    parsers: Optional[Dict[str, SectionParser]] = None,
) -> ExtractionResult:
    """Turn rendered profile markup into a normalized ProfileRecord.

    Missing optional fields fall back to empty defaults; a page without a
    title yields an empty `fullName` rather than an error.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    top = parse_top_card(soup, mobile=mobile)
    first_name, last_name = split_full_name(top.full_name)
    city, state, country = split_location(top.location)

    parsers = parsers or SECTION_PARSERS
    sections = {
        name: run_section(soup, name, parsers[name], top.location)
        for name in SECTION_IDS
        if name in parsers
    }
    empty = SectionResult.ok("", [])
    experience = sections.get("experience", empty)
    education = sections.get("education", empty).items

    record = ProfileRecord(
        full_name=top.full_name,
        first_name=first_name,
        last_name=last_name,
        city=city,
        state=state,
        gender=infer_gender(top.pronouns),
        country=country,
        linkedin_url=profile_url,
        image_url=top.image_url,
        worked_previously=_worked_previously(experience),
        degree=_degree(education),
        skills=sections.get("skills", empty).items,
        work_experiences=experience.items,
        project_experiences=sections.get("projects", empty).items,
        education_experiences=education,
        scraped_at=scraped_at or datetime.now(timezone.utc).isoformat(),
    )
    return ExtractionResult(record=record, sections=sections)


async def capture_markup(page: Page, mode: str = "evaluate", mobile: bool = False) -> str:
    """Pull the markup the extractor needs from a rendered page.

    ``evaluate`` collects only the top card and the anchored sections inside
    the page; ``content`` serializes the whole document.
    """
    if mode == "content":
        return await page.content()
    return await page.evaluate(
        SNAPSHOT_SCRIPT,
        {"selectors": snapshot_selectors(mobile), "sectionIds": list(SECTION_IDS)},
    )
