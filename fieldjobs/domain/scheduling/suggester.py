"""Open-slot search for a job over a fixed horizon, ranked by a simple heuristic score"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ... import config
from .availability_service import ConflictDetector
from .schemas import SchedulingConstraints, SchedulingSuggestion, TimeSlot
from .time_calculator import day_distance, is_weekend, window_for

logger = logging.getLogger(__name__)

BASE_SCORE = 100.0
DAY_DISTANCE_PENALTY = 5.0
CORE_HOURS = range(9, 16)  # 9-15
EXTENDED_HOURS = range(8, 18)  # 8-17
CORE_HOURS_BONUS = 20.0
EXTENDED_HOURS_BONUS = 10.0
WEEKDAY_BONUS = 15.0


def score_slot(
    slot_start: datetime, preferred_date: Optional[datetime], constraints: SchedulingConstraints
) -> float:
    score = BASE_SCORE

    if preferred_date is not None:
        score -= day_distance(slot_start, preferred_date) * DAY_DISTANCE_PENALTY

    if slot_start.hour in CORE_HOURS:
        score += CORE_HOURS_BONUS
    elif slot_start.hour in EXTENDED_HOURS:
        score += EXTENDED_HOURS_BONUS

    if constraints.weekdays_only and not is_weekend(slot_start):
        score += WEEKDAY_BONUS

    return score


class SchedulingSuggester:
    def __init__(
        self,
        conflict_detector: Optional[ConflictDetector] = None,
        horizon_days: int = config.SUGGESTION_HORIZON_DAYS,
        limit: int = config.SUGGESTION_LIMIT,
    ):
        self.conflict_detector = conflict_detector or ConflictDetector()
        self.horizon_days = horizon_days
        self.limit = limit

    def suggest(
        self,
        job,
        commitments: Iterable,
        preferred_date: Optional[datetime],
        constraints: SchedulingConstraints,
        now: Optional[datetime] = None,
    ) -> SchedulingSuggestion:
        """
        Rank conflict-free slots for ``job``.

        ``commitments`` are the jobs of the job's assigned user; a job without an assigned
        user never conflicts. A job without an estimated duration gets no suggestions.
        """
        suggestions: list[TimeSlot] = []

        if job.estimated_duration is None:
            logger.debug(f"Job {job.id} has no estimated duration, nothing to suggest")
            return SchedulingSuggestion(job_id=job.id, suggestions=[], constraints=constraints)

        commitments = list(commitments)
        search_start = preferred_date or now or datetime.now()

        for day_offset in range(self.horizon_days):
            current_date = search_start + timedelta(days=day_offset)
            if constraints.weekdays_only and is_weekend(current_date):
                continue

            for hour in range(constraints.earliest_start, constraints.latest_start + 1):
                slot_start = current_date.replace(hour=hour, minute=0, second=0, microsecond=0)

                if job.assigned_user_id is not None:
                    conflicts = self.conflict_detector.check_conflicts(
                        job.id,
                        job.assigned_user_id,
                        slot_start,
                        job.estimated_duration,
                        commitments,
                    )
                    if conflicts:
                        continue

                _, slot_end = window_for(slot_start, job.estimated_duration)
                suggestions.append(
                    TimeSlot(
                        start_time=slot_start,
                        end_time=slot_end,
                        score=score_slot(slot_start, preferred_date, constraints),
                        available=True,
                    )
                )

        # sorted() is stable, equal scores keep chronological order
        ranked = sorted(suggestions, key=lambda slot: slot.score, reverse=True)
        return SchedulingSuggestion(
            job_id=job.id, suggestions=ranked[: self.limit], constraints=constraints
        )
