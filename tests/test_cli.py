"""End-to-end tests for the cvrank command line interface."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

import pytest  # type: ignore

from conftest import CANDIDATE_A, CANDIDATE_B, CANDIDATE_C, JOB_TEXT

from cvrank.cli import main


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("CVRANK_CONFIG", raising=False)
    monkeypatch.delenv("CVRANK_STORE_DIR", raising=False)
    files = {
        "job.txt": JOB_TEXT,
        "alice_resume.txt": CANDIDATE_A,
        "bob_cv.txt": CANDIDATE_B,
        "carol.txt": CANDIDATE_C,
    }
    for name, text in files.items():
        (tmp_path / name).write_text(text, encoding="utf-8")
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield tmp_path
    # main() reconfigures the root logger; restore it for other tests
    root.handlers[:] = handlers
    root.setLevel(level)


def _run(workspace: Path, capsys, *args: str):
    code = main(["--store", str(workspace / "store"), *args])
    return code, capsys.readouterr().out


def _create(workspace: Path, capsys) -> str:
    code, out = _run(
        workspace,
        capsys,
        "create",
        "--name",
        "Backend",
        "--job",
        str(workspace / "job.txt"),
        str(workspace / "carol.txt"),
        str(workspace / "bob_cv.txt"),
        str(workspace / "alice_resume.txt"),
    )
    assert code == 0
    return out.strip().splitlines()[-1]


def test_create_rank_and_show(workspace: Path, capsys) -> None:
    batch_id = _create(workspace, capsys)
    code, out = _run(workspace, capsys, "rank", batch_id)
    assert code == 0
    assert "completed" in out

    code, out = _run(workspace, capsys, "show", batch_id)
    data = json.loads(out)
    assert data["status"] == "completed"
    assert [c["finalScore"] for c in data["candidates"]] == [100, 44, 0]
    assert [c["sourceFilename"] for c in data["candidates"]] == [
        "alice_resume.txt",
        "bob_cv.txt",
        "carol.txt",
    ]
    assert "text" not in data["candidateDocuments"][0]


def test_report_and_export(workspace: Path, capsys) -> None:
    batch_id = _create(workspace, capsys)
    _run(workspace, capsys, "rank", batch_id)

    code, out = _run(workspace, capsys, "report", batch_id, "--limit", "2")
    assert code == 0
    assert "01. Alice Smith" in out
    assert "+ Good skill alignment (2 of 2 required skills)" in out
    assert "- 1 of 3 required years of experience" in out
    assert "Carol White" not in out

    target = workspace / "ranking.csv"
    code, _ = _run(workspace, capsys, "export", batch_id, "--out", str(target))
    assert code == 0
    with open(target, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["rank"] for r in rows] == ["1", "2", "3"]
    assert rows[0]["email"] == "alice@example.com"
    assert rows[1]["missing_skills"] == "SQL"
    assert rows[0]["strengths"].startswith("Good skill alignment")


def test_list_and_delete(workspace: Path, capsys) -> None:
    batch_id = _create(workspace, capsys)
    code, out = _run(workspace, capsys, "list")
    assert batch_id in out
    code, _ = _run(workspace, capsys, "delete", batch_id)
    assert code == 0
    code, out = _run(workspace, capsys, "list")
    assert "No batches found" in out


def test_unknown_batch_exits_with_error(workspace: Path, capsys) -> None:
    code, _ = _run(workspace, capsys, "show", "doesnotexist")
    assert code == 1


def test_invalid_batch_exits_with_error(workspace: Path, capsys) -> None:
    short_job = workspace / "short.txt"
    short_job.write_text("Python", encoding="utf-8")
    code, _ = _run(
        workspace,
        capsys,
        "create",
        "--name",
        "Bad",
        "--job",
        str(short_job),
        str(workspace / "carol.txt"),
    )
    assert code == 1
