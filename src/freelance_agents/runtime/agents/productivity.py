"""Productivity agent: capacity checks and schedule suggestions.

The agent looks at a fixed planning horizon starting at ``now``. Committed
time is the estimate of every open task due inside (or before) the horizon
plus the calendar time booked inside it. Available time derives from the
billable-days and billable-hours capacity constants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from ..domain.actions import BlockNewJobsAction, DeepWorkBlockAction, ProductivityAction, ReprioritizeAction
from ..domain.models import CalendarEvent, WorkTask, parse_iso

BILLABLE_DAYS_PER_YEAR = 240
BILLABLE_HOURS_PER_DAY = 6
PLANNING_HORIZON_DAYS = 7
DEEP_WORK_MIN_TASK_HOURS = 3.0
DEEP_WORK_BLOCK_HOURS = 3
DEEP_WORK_START_HOUR = 9
URGENT_WINDOW_HOURS = 48
SCHEDULE_TRIGGERS = frozenset({"calendar_updated", "task_updated", "daily_review"})


@dataclass(frozen=True)
class Capacity:
    billable_days_per_year: int = BILLABLE_DAYS_PER_YEAR
    billable_hours_per_day: int = BILLABLE_HOURS_PER_DAY

    def hours_for(self, days: int) -> float:
        """Billable hours available across ``days`` calendar days."""
        return self.billable_hours_per_day * self.billable_days_per_year / 365 * days


@dataclass(frozen=True)
class ScheduledTask:
    id: str
    title: str
    due_date: Optional[datetime]
    est_hours: float
    done: bool
    priority: str = "medium"


@dataclass(frozen=True)
class ScheduledEvent:
    id: str
    title: str
    start: datetime
    end: datetime
    type: str = "meeting"

    @property
    def hours(self) -> float:
        return max(0.0, (self.end - self.start).total_seconds() / 3600)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end


@dataclass
class UserSchedule:
    user_id: str
    tasks: list[ScheduledTask] = field(default_factory=list)
    calendar_events: list[ScheduledEvent] = field(default_factory=list)
    capacity: Capacity = field(default_factory=Capacity)


@dataclass
class ScheduleEvaluation:
    actions: list[ProductivityAction] = field(default_factory=list)
    committed_hours: float = 0.0
    available_hours: float = 0.0


def build_schedule(user_id: str, tasks: list[WorkTask], events: list[CalendarEvent]) -> UserSchedule:
    """Snapshot a user's tasks and calendar; events without valid times are skipped."""
    scheduled_events: list[ScheduledEvent] = []
    for event in events:
        start = parse_iso(event.start_time)
        end = parse_iso(event.end_time)
        if start is None or end is None or end <= start:
            continue
        scheduled_events.append(ScheduledEvent(id=event.id, title=event.title, start=start, end=end, type=event.type))
    return UserSchedule(
        user_id=user_id,
        tasks=[
            ScheduledTask(
                id=task.id,
                title=task.title,
                due_date=parse_iso(task.due_date),
                est_hours=task.est_hours,
                done=task.done,
                priority=task.priority,
            )
            for task in tasks
        ],
        calendar_events=scheduled_events,
        capacity=Capacity(),
    )


def should_evaluate_schedule(trigger: str, schedule: UserSchedule) -> bool:
    """Gate evaluation on a known trigger and a non-empty schedule."""
    if trigger not in SCHEDULE_TRIGGERS:
        return False
    return any(not task.done for task in schedule.tasks) or bool(schedule.calendar_events)


def _open_tasks_due_by(schedule: UserSchedule, cutoff: datetime) -> list[ScheduledTask]:
    return [task for task in schedule.tasks if not task.done and task.due_date is not None and task.due_date <= cutoff]


def _booked_hours(schedule: UserSchedule, start: datetime, end: datetime) -> float:
    total = 0.0
    for event in schedule.calendar_events:
        if not event.overlaps(start, end):
            continue
        clipped_start = max(event.start, start)
        clipped_end = min(event.end, end)
        total += (clipped_end - clipped_start).total_seconds() / 3600
    return total


def _has_focus_block(schedule: UserSchedule, start: datetime, end: datetime) -> bool:
    return any(
        event.overlaps(start, end) and (event.type == "focus" or "deep work" in event.title.lower())
        for event in schedule.calendar_events
    )


def _free_deep_work_slot(schedule: UserSchedule, now: datetime) -> Optional[tuple[datetime, datetime]]:
    for offset in range(1, PLANNING_HORIZON_DAYS + 1):
        day = (now + timedelta(days=offset)).replace(hour=DEEP_WORK_START_HOUR, minute=0, second=0, microsecond=0)
        end = day + timedelta(hours=DEEP_WORK_BLOCK_HOURS)
        if not any(event.overlaps(day, end) for event in schedule.calendar_events):
            return day, end
    return None


def evaluate_schedule(schedule: UserSchedule, now: datetime) -> ScheduleEvaluation:
    """Evaluate the planning horizon and return every warranted suggestion.

    Up to three independent actions can come back from one pass: pausing new
    jobs when committed hours exceed capacity, booking a deep-work block for
    the largest task due in the horizon, and raising the priority of tasks due
    within :data:`URGENT_WINDOW_HOURS`.
    """
    horizon_end = now + timedelta(days=PLANNING_HORIZON_DAYS)
    due_in_horizon = _open_tasks_due_by(schedule, horizon_end)
    committed = sum(task.est_hours for task in due_in_horizon) + _booked_hours(schedule, now, horizon_end)
    available = schedule.capacity.hours_for(PLANNING_HORIZON_DAYS)
    result = ScheduleEvaluation(committed_hours=round(committed, 2), available_hours=round(available, 2))

    if committed > available:
        result.actions.append(
            BlockNewJobsAction(
                reason=(
                    f"Committed {committed:.1f}h over the next {PLANNING_HORIZON_DAYS} days exceeds "
                    f"{available:.1f}h of billable capacity. Pause new bids."
                ),
                committed_hours=result.committed_hours,
                available_hours=result.available_hours,
            )
        )

    large = [task for task in due_in_horizon if task.est_hours >= DEEP_WORK_MIN_TASK_HOURS]
    if large and not _has_focus_block(schedule, now, horizon_end):
        target = max(large, key=lambda task: task.est_hours)
        slot = _free_deep_work_slot(schedule, now)
        if slot is not None:
            result.actions.append(
                DeepWorkBlockAction(
                    title=target.title or "Deep Work Block",
                    start=slot[0].isoformat(),
                    end=slot[1].isoformat(),
                    task_id=target.id,
                )
            )

    urgent = [
        task
        for task in _open_tasks_due_by(schedule, now + timedelta(hours=URGENT_WINDOW_HOURS))
        if task.priority != "high"
    ]
    if urgent:
        suggestions = [
            {"taskId": task.id, "title": task.title, "currentPriority": task.priority, "suggestedPriority": "high"}
            for task in urgent
        ]
        result.actions.append(
            ReprioritizeAction(
                suggestions=suggestions,
                message=f"{len(urgent)} task(s) due within {URGENT_WINDOW_HOURS} hours should be marked high priority.",
            )
        )

    return result
