"""
Repository layer for database operations.

Async query functions over the household graph, family RSVPs, the public
RSVP ledger and the activity log. Every function takes the caller's
``AsyncSession`` and never commits, except the best-effort activity log.
"""
from rsvphub.db.repositories.household import (
    get_adult,
    dependents_of,
    co_caregivers_of,
    caregivers_of,
    related_caregivers,
    is_caregiver_of,
    count_caregivers,
)
from rsvphub.db.repositories.rsvps import (
    normalize_answer,
    normalize_ids,
    get_event,
    find_rsvp_by_creators,
    find_rsvp_for_adult,
    member_ids_by_type,
    count_youth_for_event,
    count_youth_for_rsvp,
    member_counts_for_rsvp,
    count_distinct_participants_by_answer,
    yes_counts,
    sum_guests_by_answer,
    answer_for_adult,
    list_adult_entries_by_answer,
    list_adult_names_by_answer,
    list_youth_names_by_answer,
    list_youth_ids_by_answer,
    member_display_names,
    list_event_ids_with_yes_rsvp_for_adult,
    rsvp_summary_for_adult,
    event_answer_summary,
)
from rsvphub.db.repositories.activity import log_activity

__all__ = [
    "get_adult", "dependents_of", "co_caregivers_of", "caregivers_of", "related_caregivers",
    "is_caregiver_of", "count_caregivers",
    "normalize_answer", "normalize_ids", "get_event",
    "find_rsvp_by_creators", "find_rsvp_for_adult",
    "member_ids_by_type", "count_youth_for_event", "count_youth_for_rsvp",
    "member_counts_for_rsvp", "count_distinct_participants_by_answer", "yes_counts",
    "sum_guests_by_answer", "answer_for_adult", "list_adult_entries_by_answer",
    "list_adult_names_by_answer", "list_youth_names_by_answer", "list_youth_ids_by_answer",
    "member_display_names", "list_event_ids_with_yes_rsvp_for_adult",
    "rsvp_summary_for_adult", "event_answer_summary",
    "log_activity",
]
