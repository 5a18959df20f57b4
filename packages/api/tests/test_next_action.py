# This project was developed with assistance from AI tools.
"""Unit tests for next-action selection, task ordering and note classification."""

from datetime import UTC, datetime, timedelta

import pytest
from db import NextAction
from db.enums import ActionCode, AwaitingParty, CaseStatus, HistoryEntryType, Party, Priority

from src.services.history import classify_note
from src.services.next_action import select_next_action, sort_actions

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# select_next_action
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "awaiting,owner,code",
    [
        (AwaitingParty.STUDENT, Party.STUDENT, ActionCode.UPLOAD_DOCS),
        (AwaitingParty.BANK, Party.BANK, ActionCode.PING_BANK),
        (AwaitingParty.INTERNAL_OPS, Party.INTERNAL_OPS, ActionCode.VERIFY_PROOF),
    ],
)
def test_default_action_follows_awaiting_party(awaiting, owner, code):
    template = select_next_action(CaseStatus.UNDER_REVIEW, awaiting)
    assert template.owner == owner
    assert template.action_code == code


def test_closed_awaiting_on_live_status_falls_back_to_internal():
    template = select_next_action(CaseStatus.DOCS_PENDING, AwaitingParty.CLOSED)
    assert template.owner == Party.INTERNAL_OPS


@pytest.mark.parametrize("awaiting", list(AwaitingParty))
def test_query_raised_always_goes_to_student(awaiting):
    """QueryRaised overrides the awaiting party."""
    template = select_next_action(CaseStatus.QUERY_RAISED, awaiting)
    assert template.owner == Party.STUDENT
    assert "bank query" in template.title


@pytest.mark.parametrize("status", [CaseStatus.SANCTIONED, CaseStatus.CONDITIONAL_SANCTION])
def test_sanction_statuses_review_letter(status):
    template = select_next_action(status, AwaitingParty.STUDENT)
    assert template.owner == Party.INTERNAL_OPS
    assert "sanction letter" in template.title


def test_agreement_signed_follows_up_disbursement():
    template = select_next_action(CaseStatus.AGREEMENT_SIGNED, AwaitingParty.BANK)
    assert template.owner == Party.INTERNAL_OPS
    assert template.action_code == ActionCode.FOLLOW_UP


@pytest.mark.parametrize(
    "status",
    [
        CaseStatus.CLOSED,
        CaseStatus.DROPPED,
        CaseStatus.EXPIRED,
        CaseStatus.REJECTED,
        CaseStatus.LOGIN_REJECTED,
        CaseStatus.DISBURSED,
    ],
)
def test_terminal_statuses_get_no_action(status):
    assert select_next_action(status, AwaitingParty.INTERNAL_OPS) is None


# ---------------------------------------------------------------------------
# sort_actions
# ---------------------------------------------------------------------------


def _action(action_id, priority, due_in_days):
    return NextAction(
        id=action_id,
        priority=priority,
        due_at=None if due_in_days is None else NOW + timedelta(days=due_in_days),
    )


def test_sort_actions_priority_then_due_date():
    """Urgent before High before Normal; earliest due first within a priority."""
    actions = [
        _action(1, Priority.NORMAL, 1),
        _action(2, Priority.URGENT, 5),
        _action(3, Priority.HIGH, 3),
        _action(4, Priority.URGENT, 2),
        _action(5, Priority.HIGH, None),
    ]
    assert [a.id for a in sort_actions(actions)] == [4, 2, 3, 5, 1]


def test_sort_actions_handles_naive_due_dates():
    """Naive due dates from SQLite sort alongside aware ones."""
    naive = _action(1, Priority.NORMAL, 2)
    naive.due_at = naive.due_at.replace(tzinfo=None)
    aware = _action(2, Priority.NORMAL, 1)
    assert [a.id for a in sort_actions([naive, aware])] == [2, 1]


# ---------------------------------------------------------------------------
# classify_note
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "note,entry_type",
    [
        ("[QUERY] bank asked for ITR", HistoryEntryType.QUERY),
        ("[PROOF] sanction letter received", HistoryEntryType.PROOF),
        ("[DOC] Uploaded: passport.pdf", HistoryEntryType.DOCS),
        ("[PACK] sent login pack", HistoryEntryType.PACKS),
        ("[WHATSAPP] reminded student", HistoryEntryType.WHATSAPP),
        ("  [query] lower-case tag", HistoryEntryType.QUERY),
        ("Status changed to docs_pending", HistoryEntryType.STATUS),
        ("Mentions [DOC] mid-sentence", HistoryEntryType.STATUS),
        ("", HistoryEntryType.STATUS),
        (None, HistoryEntryType.STATUS),
    ],
)
def test_classify_note(note, entry_type):
    assert classify_note(note) == entry_type
