"""
Ranking schema.

Defines the per-pair `MatchResult`, the ranked `Candidate` view, the
`Batch` aggregate and its summary.  `to_dict`/`from_dict` produce the
one canonical JSON shape used at the boundary with the frontend and by
the JSON file store (camelCase keys).

`MatchResult` and `Candidate` are frozen: a new ranking pass builds new
objects, so callers holding references from an earlier pass see stale
but never corrupted data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from ..normalize.schema import CandidateDocument, ContactInfo, JobDescription


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BatchStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class BatchMode(Enum):
    """How many job descriptions a batch is ranked against."""

    SINGLE = "single"  # exactly one
    MULTI = "multi"  # one or more; each candidate keeps its best job


@dataclass(frozen=True)
class MatchResult:
    """Un-weighted comparison of one candidate with one job description.

    `skipped` lists the dimensions ("experience", "title") that carry
    no information for this pair and are left out of the weighted score.
    `strengths` and `concerns` explain the sub-scores in words; they
    never feed back into the score.
    """

    candidate_id: str
    job_id: str
    skill_score: float
    experience_score: float
    title_score: float
    matched_skills: FrozenSet[str] = frozenset()
    missing_skills: FrozenSet[str] = frozenset()
    skipped: FrozenSet[str] = frozenset()
    education_met: bool = True
    strengths: Tuple[str, ...] = ()
    concerns: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidateId": self.candidate_id,
            "jobId": self.job_id,
            "skillScore": self.skill_score,
            "experienceScore": self.experience_score,
            "titleScore": self.title_score,
            "matchedSkills": sorted(self.matched_skills),
            "missingSkills": sorted(self.missing_skills),
            "skipped": sorted(self.skipped),
            "educationMet": self.education_met,
            "strengths": list(self.strengths),
            "concerns": list(self.concerns),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchResult":
        return cls(
            candidate_id=data["candidateId"],
            job_id=data["jobId"],
            skill_score=float(data["skillScore"]),
            experience_score=float(data["experienceScore"]),
            title_score=float(data["titleScore"]),
            matched_skills=frozenset(data.get("matchedSkills", [])),
            missing_skills=frozenset(data.get("missingSkills", [])),
            skipped=frozenset(data.get("skipped", [])),
            education_met=bool(data.get("educationMet", True)),
            strengths=tuple(data.get("strengths", [])),
            concerns=tuple(data.get("concerns", [])),
        )


@dataclass(frozen=True)
class Candidate:
    """A successfully scored candidate in ranked position."""

    document: CandidateDocument
    match_result: MatchResult
    final_score: int
    rank: int
    contact: ContactInfo = field(default_factory=ContactInfo)
    recommendation: str = ""
    fit_level: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document.id,
            "sourceFilename": self.document.source_filename,
            "name": self.contact.name,
            "email": self.contact.email,
            "phone": self.contact.phone,
            "linkedin": self.contact.linkedin,
            "finalScore": self.final_score,
            "rank": self.rank,
            "recommendation": self.recommendation,
            "fitLevel": self.fit_level,
            "skillsMatched": len(self.match_result.matched_skills),
            "skillsMissing": len(self.match_result.missing_skills),
            "matchResult": self.match_result.to_dict(),
        }


@dataclass(frozen=True)
class CandidateFailure:
    """A candidate excluded from the ranking, with the reason."""

    document_id: str
    source_filename: str
    error: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "sourceFilename": self.source_filename,
            "error": self.error,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateFailure":
        return cls(
            document_id=data["documentId"],
            source_filename=data.get("sourceFilename", ""),
            error=data.get("error", ""),
            message=data.get("message", ""),
        )


@dataclass(frozen=True)
class BatchSummary:
    """Statistics over the successfully ranked candidates of a batch."""

    total_processed: int = 0
    average_score: float = 0.0
    highly_recommended_count: int = 0
    recommended_count: int = 0
    failed_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalProcessed": self.total_processed,
            "averageScore": self.average_score,
            "highlyRecommendedCount": self.highly_recommended_count,
            "recommendedCount": self.recommended_count,
            "failedCount": self.failed_count,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BatchSummary":
        data = data or {}
        return cls(
            total_processed=int(data.get("totalProcessed", 0)),
            average_score=float(data.get("averageScore", 0.0)),
            highly_recommended_count=int(data.get("highlyRecommendedCount", 0)),
            recommended_count=int(data.get("recommendedCount", 0)),
            failed_count=int(data.get("failedCount", 0)),
        )


@dataclass
class Batch:
    """A named set of candidate documents ranked against job descriptions.

    `candidate_documents` keeps submission order, which is the tie-break
    order of the ranking.  `candidates` is the ranking itself: once the
    batch is completed it is sorted by `final_score` descending.
    `reference_date` (ISO date) is what "Present" means in the résumés,
    fixed when the batch is created so re-ranking later gives the same
    experience figures.
    """

    id: str
    name: str
    status: BatchStatus = BatchStatus.PENDING
    mode: BatchMode = BatchMode.SINGLE
    job_descriptions: List[JobDescription] = field(default_factory=list)
    candidate_documents: List[CandidateDocument] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)
    failures: List[CandidateFailure] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)
    updated_at: Optional[str] = None
    ruleset_version: Optional[str] = None
    failure_reason: Optional[str] = None
    reference_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "mode": self.mode.value,
            "jobDescriptions": [jd.to_dict() for jd in self.job_descriptions],
            "candidateDocuments": [doc.to_dict() for doc in self.candidate_documents],
            "candidates": [c.to_dict() for c in self.candidates],
            "summary": self.summary.to_dict(),
            "failures": [f.to_dict() for f in self.failures],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "rulesetVersion": self.ruleset_version,
            "failureReason": self.failure_reason,
            "referenceDate": self.reference_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Batch":
        documents = [CandidateDocument.from_dict(d) for d in data.get("candidateDocuments", [])]
        by_id = {doc.id: doc for doc in documents}
        candidates: List[Candidate] = []
        for c in data.get("candidates", []):
            document = by_id.get(c["documentId"]) or CandidateDocument(
                id=c["documentId"],
                batch_id=data["id"],
                text="",
                source_filename=c.get("sourceFilename", ""),
            )
            candidates.append(
                Candidate(
                    document=document,
                    match_result=MatchResult.from_dict(c["matchResult"]),
                    final_score=int(c["finalScore"]),
                    rank=int(c["rank"]),
                    contact=ContactInfo.from_dict(
                        {
                            "name": c.get("name", ""),
                            "email": c.get("email"),
                            "phone": c.get("phone"),
                            "linkedin": c.get("linkedin"),
                        }
                    ),
                    recommendation=c.get("recommendation", ""),
                    fit_level=c.get("fitLevel", ""),
                )
            )
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            status=BatchStatus(data.get("status", BatchStatus.PENDING.value)),
            mode=BatchMode(data.get("mode", BatchMode.SINGLE.value)),
            job_descriptions=[JobDescription.from_dict(j) for j in data.get("jobDescriptions", [])],
            candidate_documents=documents,
            candidates=candidates,
            summary=BatchSummary.from_dict(data.get("summary")),
            failures=[CandidateFailure.from_dict(f) for f in data.get("failures", [])],
            created_at=data.get("createdAt") or utc_now(),
            updated_at=data.get("updatedAt"),
            ruleset_version=data.get("rulesetVersion"),
            failure_reason=data.get("failureReason"),
            reference_date=data.get("referenceDate"),
        )
