"""
Rate Rule Conflict Checking

Two rules on one room conflict when their inclusive date ranges overlap,
their channels match (equal, or either unset) and their weekday sets
intersect. A general rule spans every weekday, so it conflicts with any
rule it overlaps; that is what keeps the resolver to at most one general
rule per night.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable
from uuid import UUID

from dateutil.relativedelta import relativedelta

from shared.domain.base import ValueObject
from shared.domain.exceptions import ConflictError, DomainValidationError
from apps.rooms.domain.entities import RateRule


class RateRuleValidationError(DomainValidationError):
    """Candidate rule is malformed or outside the authoring window"""


@dataclass(frozen=True)
class RuleConflict(ValueObject):
    rule_id: UUID | None
    shared_weekdays: frozenset
    involves_general_rule: bool

    @property
    def message(self) -> str:
        return (
            f"Rate rule conflicts with existing rule {self.rule_id}. "
            f"Overlapping date range and days of the week."
        )


class RateRuleConflictError(ConflictError):
    """Raised when persisting a rule would break the no-overlap invariant"""
    reason = 'rate_rule_overlap'

    def __init__(self, conflict: RuleConflict):
        super().__init__(conflict.message)
        self.conflict = conflict

    def details(self) -> dict:
        return {
            'reason': self.reason,
            'conflicting_rule_id': str(self.conflict.rule_id) if self.conflict.rule_id else None,
            'shared_weekdays': sorted(self.conflict.shared_weekdays),
            'involves_general_rule': self.conflict.involves_general_rule,
        }


@dataclass(frozen=True)
class AuthoringWindow(ValueObject):
    """How far back a rule may end and how far ahead it may start"""
    max_past_years: int = 1
    max_future_years: int = 5


def validate_rule_dates(candidate: RateRule, today: date, window: AuthoringWindow = AuthoringWindow()):
    """Raise RateRuleValidationError unless the rule may be authored today"""
    if candidate.start_date >= candidate.end_date:
        raise RateRuleValidationError("start_date must be before end_date")

    earliest_end = today - relativedelta(years=window.max_past_years)
    if candidate.end_date < earliest_end:
        raise RateRuleValidationError(
            f"end_date cannot be more than {window.max_past_years} year(s) in the past"
        )

    latest_start = today + relativedelta(years=window.max_future_years)
    if candidate.start_date > latest_start:
        raise RateRuleValidationError(
            f"start_date cannot be more than {window.max_future_years} year(s) in the future"
        )


def conflicts_with(candidate: RateRule, existing: RateRule) -> RuleConflict | None:
    """Symmetric pairwise conflict predicate"""
    if not (existing.start_date <= candidate.end_date and existing.end_date >= candidate.start_date):
        return None
    if not candidate.shares_channel_with(existing):
        return None
    shared = candidate.weekdays & existing.weekdays
    if not shared:
        return None
    return RuleConflict(
        rule_id=existing.id,
        shared_weekdays=frozenset(shared),
        involves_general_rule=candidate.is_general or existing.is_general,
    )


def find_conflicting_rule(
    candidate: RateRule,
    existing_rules: Iterable[RateRule],
    exclude_rule_id: UUID | None = None,
    room_id: UUID | None = None,
) -> RuleConflict | None:
    """
    First existing rule the candidate conflicts with

    Rules known to belong to another room than room_id are ignored.

    Rules are scanned by (start_date, id) so the reported conflict does not
    depend on how existing_rules is enumerated.
    """
    ordered = sorted(existing_rules, key=lambda rule: (rule.start_date, str(rule.id)))
    for existing in ordered:
        if exclude_rule_id is not None and existing.id == exclude_rule_id:
            continue
        if room_id is not None and existing.room_id not in (None, room_id):
            continue
        conflict = conflicts_with(candidate, existing)
        if conflict:
            return conflict
    return None


def check_rule_conflict(
    room_id: UUID | None,
    candidate: RateRule,
    existing_rules: Iterable[RateRule],
    exclude_rule_id: UUID | None = None,
    *,
    today: date | None = None,
    window: AuthoringWindow = AuthoringWindow(),
) -> RuleConflict | None:
    """
    Decide whether candidate may be persisted next to existing_rules

    Only existing rules on room_id are considered. Returns None when
    the rule may be saved, the conflict otherwise. Malformed candidates raise
    RateRuleValidationError.
    """
    validate_rule_dates(candidate, today or date.today(), window)
    return find_conflicting_rule(candidate, existing_rules, exclude_rule_id, room_id)
