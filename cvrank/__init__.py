"""
cvrank: deterministic CV batch ranking.

This package turns a batch of résumé texts and a job description into
a ranked, explainable candidate list.  Each submodule implements one
step of the pipeline:

1. **normalize** – Convert raw extracted text (résumé or job
   description) into a canonical `FeatureSet`: skills from a closed
   vocabulary, years of experience, recognized titles and the highest
   education level.
2. **rank** – Compare each candidate's features with the job's
   (`match`), combine the sub-scores into a 0–100 integer (`score`)
   and orchestrate a whole batch (`BatchRanker`): fan-out, stable sort,
   rank assignment and summary statistics.
3. **store** – Persist batches behind a narrow CRUD interface.
4. **service** – The inbound boundary used by the UI/API layer
   (`create_batch`, `rank`, `get_batch`, ...).
5. **cli** – Command line entry point wiring together the above
   components.

The skills vocabulary, title list, adjacency table and degree patterns
are configuration data loaded from YAML (see `config.yaml`).
"""

from importlib import metadata

try:
    __version__ = metadata.version("cvrank")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0"
