from __future__ import annotations
import logging, threading
from datetime import datetime, timezone
from pathlib import Path

from ..errors import StorageError
from ..schemas import QuizResponse, iso_utc
from .csvlog import append_row

log = logging.getLogger("quiz")

QUIZ_FIELDS = ["who_caring_for", "dementia_dx", "recent_changes", "biggest_challenge", "join_cohort_interest"]
CSV_FIELDS = ["timestamp"] + QUIZ_FIELDS + ["stage"]

STAGES = {
    "occasional_memory_lapses": 1,
    "noticeable_confusion_task_difficulty": 2,
    "frequent_repetition_safety_concerns": 3,
    "significant_help_daily_care": 4,
}

STAGE_DETAILS = {
    1: {
        "headline": "Early changes",
        "experience": "Caregivers in this stage are noticing occasional memory lapses and are trying to "
                      "understand what is “normal”, prepare for medical visits and plan ahead.",
    },
    2: {
        "headline": "Growing confusion",
        "experience": "Caregivers in this stage are navigating noticeable confusion and difficulty with "
                      "everyday tasks, and are balancing safety with independence.",
    },
    3: {
        "headline": "Frequent repetition and safety concerns",
        "experience": "Caregivers in this stage are managing repeated questions, wandering or other safety "
                      "concerns, and are often adjusting routines and the home environment.",
    },
    4: {
        "headline": "Significant daily care",
        "experience": "Caregivers in this stage are providing hands-on help with daily care and are often "
                      "coordinating support, respite and their own wellbeing.",
    },
}

ACTIVITIES = [
    "Weekly small-group check-ins",
    "Stage-specific education and tools",
    "Space to share what’s working (and what isn’t) with peers in a similar spot",
]

_lock = threading.Lock()


def score(recent_changes) -> int:
    return STAGES.get(recent_changes, 1) if isinstance(recent_changes, str) else 1


def stage_label(stage: int) -> str:
    return f"Stage {stage} Cohort"


def stage_details(stage: int) -> dict:
    return STAGE_DETAILS.get(stage, STAGE_DETAILS[1])


def append_response(path: Path, fields: dict) -> QuizResponse:
    answers = {}
    for k in QUIZ_FIELDS:
        v = fields.get(k, "")
        if v is None:
            v = ""
        if not isinstance(v, str):
            v = str(v)
        answers[k] = v.strip()

    resp = QuizResponse(
        timestamp=iso_utc(datetime.now(timezone.utc)),
        stage=stage_label(score(answers["recent_changes"])),
        **answers,
    )
    try:
        with _lock:
            append_row(Path(path), CSV_FIELDS, resp.model_dump())
    except OSError as e:
        log.error("Error writing quiz CSV %s: %s", path, e)
        raise StorageError("Failed to save quiz response") from e
    return resp
