"""
Normalization subsystem for cvrank.

This package converts raw extracted document text into structured
`FeatureSet` instances: skills from a closed vocabulary, recognized
titles, years of experience and the highest education level.  It also
provides contact detail heuristics used to label candidates.

The skills vocabulary, title table and degree patterns come from the
ruleset (see `cvrank.config`).
"""

from .schema import (  # noqa: F401
    CandidateDocument,
    ContactInfo,
    EducationLevel,
    FeatureSet,
    JobDescription,
)
from .normalizer import Normalizer, normalize  # noqa: F401
from .contact import extract_contact  # noqa: F401
