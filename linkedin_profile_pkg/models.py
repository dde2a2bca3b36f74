from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .config import COOKIE_DOMAIN


class _CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class _FrozenCamelModel(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ScrapeRequest(_CamelModel):
    """Incoming `POST /scrape` payload.

    `profile_url` is optional at the schema level so that a missing value is
    answered with the service's own 400 envelope instead of a validation 422.
    """
    profile_url: Optional[str] = None


class SessionCookie(_FrozenCamelModel):
    """One browser cookie as persisted in the cookie file.

    Field names follow the browser cookie shape (`httpOnly`, `sameSite`), so
    the persisted JSON can be fed back to the browser unchanged.
    """
    name: str
    value: str
    domain: str = COOKIE_DOMAIN
    path: str = "/"
    expires: Optional[float] = None
    http_only: bool = False
    secure: bool = False
    same_site: Optional[str] = None

    def to_browser_cookie(self) -> dict:
        cookie = {
            "name": self.name,
            "value": self.value,
            "domain": self.domain or COOKIE_DOMAIN,
            "path": self.path or "/",
            "httpOnly": self.http_only,
            "secure": self.secure,
        }
        if self.expires is not None:
            cookie["expires"] = self.expires
        if self.same_site:
            cookie["sameSite"] = self.same_site
        return cookie


class WorkExperience(_FrozenCamelModel):
    job_title: str
    company_name: str = ""
    start_date: str = ""
    end_date: str = ""
    skills: Tuple[str, ...] = ()
    still_working: bool = False
    description: str = ""
    location: str = ""
    work_type: str = ""


class ProjectExperience(_FrozenCamelModel):
    project_name: str
    start_date: str = ""
    end_date: str = ""
    skills: Tuple[str, ...] = ()
    still_working: bool = False
    description: str = ""
    git_url: str = ""
    host_url: str = ""


class EducationExperience(_FrozenCamelModel):
    course_name: str = ""
    field: str = ""
    college_name: str
    start_date: str = ""
    end_date: str = ""
    skills: Tuple[str, ...] = ()
    still_studying: bool = False
    description: str = ""
    grade: str = ""
    location: str = ""
    education_type: str = ""


class ProfileRecord(_FrozenCamelModel):
    """Normalized profile produced once per successful scrape."""
    full_name: str = ""
    first_name: str = ""
    last_name: str = ""
    source: str = "LinkedIn"
    city: str = ""
    state: str = ""
    gender: str = ""
    country: str = ""
    linkedin_url: str = ""
    image_url: str = ""
    worked_previously: str = "unknown"
    degree: str = ""
    skills: Tuple[str, ...] = ()
    work_experiences: Tuple[WorkExperience, ...] = ()
    project_experiences: Tuple[ProjectExperience, ...] = ()
    education_experiences: Tuple[EducationExperience, ...] = ()
    scraped_at: str = ""
