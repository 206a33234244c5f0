"""Typed views over the event API resources."""
from __future__ import annotations

import enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Identifier = Union[int, str]


class _Resource(BaseModel):
    # The API grows fields faster than this app; keep whatever arrives.
    model_config = ConfigDict(extra="allow")


class CountrySummary(_Resource):
    id: Optional[Identifier] = None
    name: Optional[str] = None
    iso: Optional[str] = None


class UserLinkedInfo(_Resource):
    id: Optional[Identifier] = None
    email: Optional[str] = None


class AthleteDetail(_Resource):
    id: Optional[Identifier] = None
    name: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    user: Optional[UserLinkedInfo] = None
    identification_number: Optional[Identifier] = None
    country: Optional[CountrySummary] = None
    nationality: Optional[CountrySummary] = None
    avatar: Optional[str] = None
    active: Optional[bool] = None
    birth_date: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    country_id: Optional[Identifier] = None
    nationality_id: Optional[Identifier] = None
    vat_number: Optional[Identifier] = None

    @property
    def display_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip()
        parts = [part.strip() for part in (self.firstname, self.lastname) if part and part.strip()]
        return " ".join(parts) or "Athlete"


class CourseResource(_Resource):
    id: Optional[Identifier] = None
    name: Optional[str] = None
    distance: Optional[Identifier] = None


class CategoryResource(_Resource):
    id: Optional[Identifier] = None
    name: Optional[str] = None
    code: Optional[str] = None


class TeamResource(_Resource):
    name: Optional[str] = None


class EventResource(_Resource):
    id: Optional[Identifier] = None
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    date_resume: Optional[str] = None
    courses_count: Optional[int] = None
    start_date: Optional[str] = None
    start_time: Optional[str] = None
    end_date: Optional[str] = None
    end_time: Optional[str] = None
    courses: List[CourseResource] = Field(default_factory=list)

    @field_validator("courses", mode="before")
    @classmethod
    def _null_courses(cls, value):
        return [] if value is None else value


class RegistrationExtra(_Resource):
    id: Optional[Identifier] = None
    value: Optional[Identifier] = None
    type: Optional[str] = None
    status: Optional[str] = None


class RegistrationResource(_Resource):
    """A single athlete entry; the unit of check-in."""

    id: Identifier
    athlete: AthleteDetail = Field(default_factory=AthleteDetail)
    event: Optional[EventResource] = None
    course: Optional[CourseResource] = None
    category: Optional[CategoryResource] = None
    team: Optional[TeamResource] = None
    extras: List[RegistrationExtra] = Field(default_factory=list)
    status: Optional[str] = None
    check_in: bool = False
    bib_number: Optional[Identifier] = None
    allow_check_in: bool = False
    registered_on: Optional[str] = None
    registered_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("extras", mode="before")
    @classmethod
    def _null_extras(cls, value):
        return [] if value is None else value

    @field_validator("check_in", "allow_check_in", mode="before")
    @classmethod
    def _null_flag(cls, value):
        return False if value is None else value

    def summary(self) -> dict:
        """Fields the confirmation and result list screens display."""
        return {
            "id": self.id,
            "name": self.athlete.display_name,
            "identification_number": self.athlete.identification_number,
            "avatar": self.athlete.avatar,
            "bib_number": self.bib_number,
            "course": self.course.name if self.course else None,
            "category": self.category.name if self.category else None,
            "team": self.team.name if self.team else None,
            "extras": [{"type": extra.type, "value": extra.value} for extra in self.extras],
            "check_in": self.check_in,
            "allow_check_in": self.allow_check_in,
        }


class AppEvent(BaseModel):
    """Event the operator is checking athletes into."""

    id: Identifier
    name: str = ""


class AppProfile(BaseModel):
    name: str
    email: str = ""


class SearchParameter(str, enum.Enum):
    BIB_NUMBER = "bib_number"
    IDENTIFICATION_NUMBER = "identification_number"
    CODE = "code"

    @property
    def label(self) -> str:
        return _SEARCH_LABELS[self]


_SEARCH_LABELS = {
    SearchParameter.BIB_NUMBER: "Bib number",
    SearchParameter.IDENTIFICATION_NUMBER: "Identification number",
    SearchParameter.CODE: "Code",
}


__all__ = [
    "AppEvent",
    "AppProfile",
    "AthleteDetail",
    "CategoryResource",
    "CountrySummary",
    "CourseResource",
    "EventResource",
    "RegistrationExtra",
    "RegistrationResource",
    "SearchParameter",
    "TeamResource",
    "UserLinkedInfo",
]
