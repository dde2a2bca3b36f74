import re
from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, List, Tuple, TypeVar

T = TypeVar("T")

MONTH_YEAR_RE = re.compile(r"\b[A-Za-z]{3}\s\d{4}\b")
PRESENT_RE = re.compile(r"present", re.I)
IMAGE_CAPTION_RE = re.compile(r"screenshot|\.png|\.jpg|\.jpeg|\.gif|\.svg", re.I)
META_SEPARATOR_RE = re.compile(r"\s*·\s*")

MALE_RE = re.compile(r"\b(he|him)\b|\bmr\.", re.I)
FEMALE_RE = re.compile(r"\b(she|her)\b|\bmrs?\.|\bms\.", re.I)


@dataclass(frozen=True)
class DateRange:
    start: str = ""
    end: str = ""
    ongoing: bool = False


def parse_date_range(text: str) -> DateRange:
    """Split a "Jan 2020 - Present" style range into start/end.

    The first two month/year tokens are start and end. A "present" token
    anywhere forces an empty end and marks the range as ongoing, whatever a
    second token matched.
    """
    if not text:
        return DateRange()
    tokens = MONTH_YEAR_RE.findall(text)
    start = tokens[0] if tokens else ""
    if PRESENT_RE.search(text):
        return DateRange(start=start, end="", ongoing=True)
    end = tokens[1] if len(tokens) > 1 else ""
    return DateRange(start=start, end=end, ongoing=False)


def split_full_name(full_name: str) -> Tuple[str, str]:
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def split_location(location: str) -> Tuple[str, str, str]:
    """Return (city, state, country) from "City, State, Country".

    City is the first segment; state and country are only filled when the
    string has a comma (second and last segment respectively).
    """
    if not location:
        return "", "", ""
    segments = [s.strip() for s in location.split(",")]
    city = segments[0]
    if len(segments) == 1:
        return city, "", ""
    return city, segments[1], segments[-1]


def infer_gender(pronoun_text: str) -> str:
    if not pronoun_text:
        return ""
    if MALE_RE.search(pronoun_text):
        return "Male"
    if FEMALE_RE.search(pronoun_text):
        return "Female"
    return ""


def split_meta(meta: str) -> Tuple[str, str]:
    """Split "Acme Corp · Full-time" into (entity, sub-type)."""
    if not meta:
        return "", ""
    parts = [p for p in META_SEPARATOR_RE.split(meta.strip()) if p]
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


def is_image_caption(name: str) -> bool:
    return bool(IMAGE_CAPTION_RE.search(name or ""))


def dedupe(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Keep the first item per key, preserving order of first appearance."""
    seen = set()
    unique: List[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        unique.append(item)
    return unique
