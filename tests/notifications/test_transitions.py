"""
Tests for the transition classifier.

Tests:
- Status/approval family and its priority order
- Upvote family
- Comment/response family
- Entry point for report and announcement events
"""

import pytest
from pydantic import ValidationError

from domain.events import DocumentChange, EntityType, Operation
from domain.models import Report
from notifications.transitions import (
    TransitionKind,
    classify_change,
    classify_comment,
    classify_report_update,
    classify_status_change,
    classify_upvote,
)

from factories import admin_comment, make_announcement, make_report, user_comment


def report(**fields) -> Report:
    return Report.from_document("r1", make_report(**fields))


def kinds(transitions):
    return [t.kind for t in transitions]


class TestStatusFamily:
    """Tests for status and approval transitions."""

    def test_approval_is_accepted(self):
        kind = classify_status_change(report(), report(approved=True))
        assert kind == TransitionKind.REPORT_ACCEPTED

    def test_in_progress(self):
        kind = classify_status_change(
            report(approved=True), report(approved=True, status="In Progress")
        )
        assert kind == TransitionKind.REPORT_IN_PROGRESS

    def test_done(self):
        kind = classify_status_change(
            report(approved=True, status="In Progress"), report(approved=True, status="Done")
        )
        assert kind == TransitionKind.REPORT_DONE

    def test_unapproval_is_rejected(self):
        kind = classify_status_change(report(approved=True), report(approved=False))
        assert kind == TransitionKind.REPORT_REJECTED

    def test_approval_wins_over_done_in_same_write(self):
        """Approving and finishing at once only reports the approval."""
        kind = classify_status_change(report(), report(approved=True, status="Done"))
        assert kind == TransitionKind.REPORT_ACCEPTED

    def test_done_wins_over_rejection_in_same_write(self):
        kind = classify_status_change(report(approved=True), report(approved=False, status="Done"))
        assert kind == TransitionKind.REPORT_DONE

    def test_nothing_changed(self):
        assert classify_status_change(report(approved=True), report(approved=True)) is None

    def test_status_back_to_pending_is_silent(self):
        before = report(approved=True, status="In Progress")
        after = report(approved=True, status="Pending")
        assert classify_status_change(before, after) is None

    def test_missing_approved_counts_as_false(self):
        before = Report.from_document("r1", {"reporterId": "u1", "status": "Pending"})
        after = Report.from_document("r1", {"reporterId": "u1", "status": "Pending", "approved": True})
        assert classify_status_change(before, after) == TransitionKind.REPORT_ACCEPTED


class TestUpvoteFamily:
    """Tests for the upvote transition."""

    def test_increase(self):
        assert classify_upvote(report(upvotes=2), report(upvotes=3)) == TransitionKind.UPVOTE

    def test_decrease_is_silent(self):
        assert classify_upvote(report(upvotes=3), report(upvotes=2)) is None

    def test_unchanged_is_silent(self):
        assert classify_upvote(report(upvotes=3), report(upvotes=3)) is None

    def test_missing_count_is_zero(self):
        before = Report.from_document("r1", {"reporterId": "u1"})
        assert classify_upvote(before, report(upvotes=1)) == TransitionKind.UPVOTE


class TestCommentFamily:
    """Tests for admin comments and responses."""

    def test_admin_comment(self):
        after = report(comments=[admin_comment()])
        assert classify_comment(report(), after) == TransitionKind.ADMIN_COMMENT

    def test_admin_response(self):
        after = report(admin_response="Cleanup crew dispatched")
        assert classify_comment(report(), after) == TransitionKind.ADMIN_RESPONSE

    def test_admin_comment_wins_over_response(self):
        after = report(comments=[admin_comment()], admin_response="Crew dispatched")
        assert classify_comment(report(), after) == TransitionKind.ADMIN_COMMENT

    def test_reporter_comment_suppresses_family(self):
        """A reporter's own comment never notifies, even with a new response."""
        after = report(
            comments=[user_comment(user_id="reporter-1")],
            admin_response="Crew dispatched",
        )
        assert classify_comment(report(), after) is None

    def test_plain_user_comment_is_silent(self):
        after = report(comments=[user_comment()])
        assert classify_comment(report(), after) is None

    def test_plain_user_comment_with_new_response(self):
        after = report(comments=[user_comment()], admin_response="Crew dispatched")
        assert classify_comment(report(), after) == TransitionKind.ADMIN_RESPONSE

    def test_unchanged_response_is_silent(self):
        before = report(admin_response="Crew dispatched")
        after = report(admin_response="Crew dispatched")
        assert classify_comment(before, after) is None

    def test_cleared_response_is_silent(self):
        before = report(admin_response="Crew dispatched")
        after = report(admin_response="")
        assert classify_comment(before, after) is None

    def test_removed_comment_is_silent(self):
        before = report(comments=[admin_comment(), admin_comment("second")])
        after = report(comments=[admin_comment()])
        assert classify_comment(before, after) is None


class TestReportUpdate:
    """Tests for running every rule family on one update."""

    def test_families_are_independent(self):
        before = report()
        after = report(approved=True, upvotes=1, comments=[admin_comment()])
        result = classify_report_update("r1", before, after)
        assert kinds(result) == [
            TransitionKind.REPORT_ACCEPTED,
            TransitionKind.UPVOTE,
            TransitionKind.ADMIN_COMMENT,
        ]

    def test_admin_comment_transition_carries_comment(self):
        after = report(comments=[user_comment(), admin_comment("On it")])
        [transition] = classify_report_update("r1", report(comments=[user_comment()]), after)
        assert transition.comment.text == "On it"
        assert transition.report.location == "Rizal Street"

    def test_no_reporter_yields_nothing(self):
        before = report(reporter_id=None)
        after = report(reporter_id=None, approved=True, upvotes=5)
        assert classify_report_update("r1", before, after) == []

    def test_irrelevant_update(self):
        before = report()
        after = report(description="Updated description")
        assert classify_report_update("r1", before, after) == []


class TestClassifyChange:
    """Tests for the event entry point."""

    def test_report_create(self):
        change = DocumentChange(
            entity=EntityType.REPORT,
            operation=Operation.CREATE,
            document_id="r1",
            after=make_report(),
        )
        [transition] = classify_change(change)
        assert transition.kind == TransitionKind.NEW_REPORT
        assert transition.barangay_id == "brgy-1"

    def test_report_update(self):
        change = DocumentChange(
            entity=EntityType.REPORT,
            operation=Operation.UPDATE,
            document_id="r1",
            before=make_report(upvotes=0),
            after=make_report(upvotes=1),
        )
        assert kinds(classify_change(change)) == [TransitionKind.UPVOTE]

    def test_announcement_create(self):
        change = DocumentChange(
            entity=EntityType.ANNOUNCEMENT,
            operation=Operation.CREATE,
            document_id="a1",
            after=make_announcement(barangay_id="brgy-2"),
        )
        [transition] = classify_change(change)
        assert transition.kind == TransitionKind.ANNOUNCEMENT
        assert transition.announcement.title == "Clean-up Drive"
        assert transition.barangay_id == "brgy-2"

    def test_announcement_update_is_ignored(self):
        change = DocumentChange(
            entity=EntityType.ANNOUNCEMENT,
            operation=Operation.UPDATE,
            document_id="a1",
            before=make_announcement(),
            after=make_announcement(title="Changed"),
        )
        assert classify_change(change) == []

    def test_camel_case_payload(self):
        change = DocumentChange.model_validate({
            "entity": "report",
            "operation": "update",
            "documentId": "r1",
            "eventId": "evt-1",
            "before": make_report(),
            "after": make_report(approved=True),
        })
        assert change.event_id == "evt-1"
        assert kinds(classify_change(change)) == [TransitionKind.REPORT_ACCEPTED]

    def test_update_requires_before(self):
        with pytest.raises(ValidationError):
            DocumentChange(
                entity=EntityType.REPORT,
                operation=Operation.UPDATE,
                document_id="r1",
                after=make_report(),
            )

    def test_document_id_required(self):
        with pytest.raises(ValidationError):
            DocumentChange(entity=EntityType.REPORT, operation=Operation.CREATE, document_id="")
