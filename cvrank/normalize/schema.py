"""
Normalized document schema.

`CandidateDocument` and `JobDescription` hold the raw extracted text
accepted into a batch; both are immutable once created.  `FeatureSet`
is the canonical, comparable representation the normalizer derives
from either kind of document.  FeatureSets are never cached: they are
recomputed on every ranking pass so a ruleset change always takes
effect.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


def new_id() -> str:
    return uuid.uuid4().hex


class EducationLevel(Enum):
    """Highest recognized degree, ordered from none to doctorate."""

    NONE = "none"
    ASSOCIATE = "associate"
    BACHELOR = "bachelor"
    MASTER = "master"
    DOCTORATE = "doctorate"

    @property
    def order(self) -> int:
        return _EDUCATION_ORDER.index(self)

    def __lt__(self, other: "EducationLevel") -> bool:
        if not isinstance(other, EducationLevel):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other: "EducationLevel") -> bool:
        if not isinstance(other, EducationLevel):
            return NotImplemented
        return self.order <= other.order

    @classmethod
    def from_name(cls, name: str) -> "EducationLevel":
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            valid = ", ".join(level.value for level in cls)
            raise ValueError(f"unknown education level {name!r}; expected one of {valid}") from None


_EDUCATION_ORDER = list(EducationLevel)


@dataclass(frozen=True)
class CandidateDocument:
    """A résumé accepted into a batch."""

    id: str
    batch_id: str
    text: str
    source_filename: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "batchId": self.batch_id,
            "text": self.text,
            "sourceFilename": self.source_filename,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateDocument":
        return cls(
            id=data["id"],
            batch_id=data["batchId"],
            text=data.get("text", ""),
            source_filename=data.get("sourceFilename", ""),
        )


@dataclass(frozen=True)
class JobDescription:
    """The job description a batch is ranked against."""

    id: str
    batch_id: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "batchId": self.batch_id, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobDescription":
        return cls(id=data["id"], batch_id=data["batchId"], text=data.get("text", ""))


@dataclass(frozen=True)
class FeatureSet:
    """Canonical features of one document.

    `experience_known` is False when no experience evidence was found;
    `experience_years` is then 0 but must be read as "unknown", not as
    "no experience".
    """

    skills: FrozenSet[str] = frozenset()
    titles: Tuple[str, ...] = ()
    experience_years: float = 0.0
    education_level: EducationLevel = EducationLevel.NONE
    experience_known: bool = False

    @property
    def required_years(self) -> float:
        """Alias used when this FeatureSet describes a job description."""
        return self.experience_years

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skills": sorted(self.skills),
            "titles": list(self.titles),
            "experienceYears": self.experience_years,
            "educationLevel": self.education_level.value,
            "experienceKnown": self.experience_known,
        }


@dataclass(frozen=True)
class ContactInfo:
    """Contact details found in a résumé; informational only."""

    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "linkedin": self.linkedin,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ContactInfo":
        data = data or {}
        return cls(
            name=data.get("name", ""),
            email=data.get("email"),
            phone=data.get("phone"),
            linkedin=data.get("linkedin"),
        )
