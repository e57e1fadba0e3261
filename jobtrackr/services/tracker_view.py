"""
View logic for the tracker UI.

Pure functions shared by the API schemas and the HTML pages:
- tag list encoding to and from the comma-joined storage column
- the add-tag rule used by the create/edit form
- dashboard counts and the search/status filter predicate
- the cosmetic status progress indicator of the detail view
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from jobtrackr.models.application import ApplicationStatus

TAG_SEPARATOR = ","

# Status labels counted on the dashboard cards, in display order
DASHBOARD_STATUSES = (
    ApplicationStatus.SENT.value,
    ApplicationStatus.FOLLOWED_UP.value,
    ApplicationStatus.REJECTED.value,
)

# Ordinal of each status on the progress bar. "Refusé" branches off
# between "Relancé" and "Entretien".
STATUS_STEPS = {
    ApplicationStatus.TODO.value: 1,
    ApplicationStatus.SENT.value: 2,
    ApplicationStatus.FOLLOWED_UP.value: 3,
    ApplicationStatus.REJECTED.value: 3.5,
    ApplicationStatus.INTERVIEW.value: 4,
    ApplicationStatus.ACCEPTED.value: 5,
}


def join_tags(tags: Optional[Iterable[str]]) -> str:
    """Encode a tag list for storage. No escaping: commas inside a tag survive only as separators."""
    if not tags:
        return ""
    return TAG_SEPARATOR.join(tags)


def split_tags(value: Union[str, Sequence[str], None]) -> List[str]:
    """Decode the stored tag string; lists pass through unchanged."""
    if value is None:
        return []
    if isinstance(value, str):
        if value == "":
            return []
        return value.split(TAG_SEPARATOR)
    return list(value)


def add_tag(tags: Sequence[str], new_tag: Optional[str]) -> List[str]:
    """
    Append a tag to the draft list.

    Empty input and exact duplicates (case-sensitive) leave the list as is.
    """
    tags = list(tags)
    if new_tag and new_tag not in tags:
        tags.append(new_tag)
    return tags


def remove_tag(tags: Sequence[str], index: int) -> List[str]:
    tags = list(tags)
    if 0 <= index < len(tags):
        del tags[index]
    return tags


def count_with_status(applications: Iterable, status: str) -> int:
    """Count applications whose status matches, ignoring case."""
    wanted = status.lower()
    return sum(1 for app in applications if (app.status or "").lower() == wanted)


def dashboard_stats(applications: Sequence) -> dict:
    """Total plus one count per dashboard status label."""
    stats = {"total": len(applications)}
    for status in DASHBOARD_STATUSES:
        stats[status] = count_with_status(applications, status)
    return stats


def matches_filter(application, search: str = "", status: str = "") -> bool:
    """
    Dashboard filter predicate.

    A record matches when the search string is empty or a case-insensitive
    substring of company or position, and the status filter is empty or
    equal to the record's status ignoring case.
    """
    if search:
        needle = search.lower()
        matches_search = (
            needle in (application.company or "").lower()
            or needle in (application.position or "").lower()
        )
    else:
        matches_search = True

    if status:
        matches_status = (application.status or "").lower() == status.lower()
    else:
        matches_status = True

    return matches_search and matches_status


def filter_applications(applications: Iterable, search: str = "", status: str = "") -> list:
    return [app for app in applications if matches_filter(app, search, status)]


@dataclass(frozen=True)
class ProgressStep:
    """One segment of the detail view progress bar."""
    label: str
    active: bool
    current: bool
    tone: str  # "progress", "success", "rejected" or "idle"


def is_step_active(current_status: str, step: str) -> bool:
    current_value = STATUS_STEPS.get(current_status, 0)
    step_value = STATUS_STEPS.get(step, 0)

    if current_status == ApplicationStatus.REJECTED.value:
        # Everything before the rejection stays lit, plus the rejection itself
        if step_value < STATUS_STEPS[ApplicationStatus.REJECTED.value]:
            return True
        return step == ApplicationStatus.REJECTED.value

    return step_value <= current_value


def status_progress(current_status: str) -> List[ProgressStep]:
    """
    Build the five progress bar segments for a status.

    The third segment is shared: it reads "Refusé" for rejected
    applications and "Relancé" otherwise. Unknown statuses light nothing.
    """
    todo = ApplicationStatus.TODO.value
    sent = ApplicationStatus.SENT.value
    followed_up = ApplicationStatus.FOLLOWED_UP.value
    rejected = ApplicationStatus.REJECTED.value
    interview = ApplicationStatus.INTERVIEW.value
    accepted = ApplicationStatus.ACCEPTED.value
    is_rejected = current_status == rejected

    def _linear(step: str) -> ProgressStep:
        active = is_step_active(current_status, step)
        return ProgressStep(
            label=step,
            active=active,
            current=current_status == step,
            tone="progress" if active else "idle",
        )

    if is_rejected:
        branch = ProgressStep(label=rejected, active=True, current=True, tone="rejected")
    else:
        active = is_step_active(current_status, followed_up)
        branch = ProgressStep(
            label=followed_up,
            active=active,
            current=current_status == followed_up,
            tone="progress" if active else "idle",
        )

    if is_rejected:
        interview_step = ProgressStep(label=interview, active=False, current=False, tone="idle")
    else:
        interview_step = _linear(interview)

    is_accepted = current_status == accepted
    accepted_step = ProgressStep(
        label=accepted,
        active=is_accepted,
        current=is_accepted,
        tone="success" if is_accepted else "idle",
    )

    return [_linear(todo), _linear(sent), branch, interview_step, accepted_step]
