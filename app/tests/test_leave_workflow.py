"""
Tests for the leave workflow engine, driven by an in-memory directory
"""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.constants import HR_DEPARTMENT_NAME, LEVEL_HOD, LEVEL_SUPER_ADMIN
from app.core.errors import (
    Conflict,
    Forbidden,
    InvalidState,
    LeaveValidationError,
    NoApproverFound,
)
from app.models.department import Department
from app.models.employee import Employee
from app.models.leave import ApprovalStatus, LeaveRequest, LeaveStatus, LeaveType
from app.models.notification import NotificationType
from app.models.role import RoleModel
from app.services import leave_workflow as workflow
from app.services.leave_workflow import AuditEffect, NotificationEffect

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
START = date(2025, 3, 10)
END = date(2025, 3, 12)


def no_overlap(start_date, end_date):
    return None


class FakeDirectory:
    def __init__(self, employees):
        self.employees = list(employees)

    def _first(self, predicate):
        matches = [e for e in self.employees if e.active and predicate(e)]
        return min(matches, key=lambda e: e.id) if matches else None

    def find_hod(self, department_id):
        return self._first(lambda e: e.role_level == LEVEL_HOD and e.department_id == department_id)

    def find_hr_hod(self):
        return self._first(lambda e: e.is_hr_hod)

    def find_super_admin(self):
        return self._first(lambda e: e.role_level >= LEVEL_SUPER_ADMIN)


DEPARTMENTS = {
    "hr": Department(id=1, name=HR_DEPARTMENT_NAME),
    "eng": Department(id=2, name="Engineering"),
    "mkt": Department(id=3, name="Marketing"),
    "exec": Department(id=4, name="Executive"),
}


def _person(id, first_name, level, dept):
    department = DEPARTMENTS[dept]
    return Employee(
        id=id,
        employee_code=f"E{id:03d}",
        first_name=first_name,
        last_name="Tester",
        email=f"e{id}@elra.test",
        role=RoleModel(name=str(level), level=level),
        department=department,
        department_id=department.id,
        active=True,
    )


@pytest.fixture
def people():
    class People:
        super_admin = _person(1, "Sara", 1000, "exec")
        hr_hod = _person(2, "Helen", 700, "hr")
        hr_staff = _person(3, "Harry", 300, "hr")
        eng_hod = _person(4, "Evan", 700, "eng")
        eng_manager = _person(5, "Maya", 600, "eng")
        eng_staff = _person(6, "Sam", 300, "eng")
        viewer = _person(7, "Victor", 100, "eng")
        mkt_hod = _person(8, "Mark", 700, "mkt")
        mkt_staff = _person(9, "Mia", 300, "mkt")
    return People


@pytest.fixture
def directory(people):
    return FakeDirectory(
        value for name, value in vars(people).items() if isinstance(value, Employee)
    )


def _create(employee, directory, start=START, end=END, find_overlap=no_overlap):
    transition = workflow.plan_creation(
        employee,
        directory,
        leave_type=LeaveType.ANNUAL,
        start_date=start,
        end_date=end,
        days=Decimal("2"),
        reason="Family trip",
        find_overlap=find_overlap,
        now=NOW,
    )
    transition.leave_request.id = 100
    return transition


def _types(transition, recipient):
    return [n.type for n in transition.notified(recipient.id)]


# --- creation ---


def test_staff_request_routes_to_department_hod(people, directory):
    transition = _create(people.eng_staff, directory)
    lr = transition.leave_request

    assert transition.before is None
    assert lr.status == LeaveStatus.PENDING
    assert lr.approval_chain == ["Department HOD", "HR HOD"]
    assert lr.total_approval_steps == len(lr.approval_chain)
    assert lr.current_approver_id == people.eng_hod.id
    assert lr.approval_level == 2
    assert lr.submitted_at == NOW
    assert [(a.approver_id, a.status) for a in lr.approvals] == [(people.eng_hod.id, ApprovalStatus.PENDING)]

    assert _types(transition, people.eng_hod) == [NotificationType.LEAVE_REQUEST]
    assert _types(transition, people.eng_staff) == [NotificationType.LEAVE_REQUEST_UPDATE]
    assert _types(transition, people.super_admin) == [NotificationType.LEAVE_REQUEST]
    assert [a.action for a in transition.audits] == ["LEAVE_REQUEST_CREATED"]
    assert "Department HOD -> HR HOD" in transition.notified(people.eng_staff.id)[0].message


def test_effects_are_ordered_approver_first(people, directory):
    transition = _create(people.eng_staff, directory)
    recipients = [e.recipient_id for e in transition.effects if isinstance(e, NotificationEffect)]
    assert recipients == [people.eng_hod.id, people.eng_staff.id, people.super_admin.id]
    assert isinstance(transition.effects[-1], AuditEffect)


def test_hr_staff_request_is_single_step(people, directory):
    lr = _create(people.hr_staff, directory).leave_request
    assert lr.approval_chain == ["HR HOD"]
    assert lr.total_approval_steps == 1
    assert lr.current_approver_id == people.hr_hod.id


def test_hod_request_goes_to_hr_hod(people, directory):
    lr = _create(people.mkt_hod, directory).leave_request
    assert lr.approval_chain == ["HR HOD"]
    assert lr.current_approver_id == people.hr_hod.id


def test_department_without_hod_falls_back_to_hr_hod(people):
    directory = FakeDirectory([people.super_admin, people.hr_hod, people.eng_staff])
    lr = _create(people.eng_staff, directory).leave_request
    assert lr.approval_chain == ["Department HOD", "HR HOD"]
    assert lr.current_approver_id == people.hr_hod.id


def test_hr_hod_own_request_goes_to_super_admin(people, directory):
    transition = _create(people.hr_hod, directory)
    lr = transition.leave_request
    assert lr.current_approver_id == people.super_admin.id
    assert lr.approval_chain == ["Super Admin"]
    assert lr.total_approval_steps == 1
    # Super Admin is already the approver, so no separate oversight copy
    assert len(transition.notified(people.super_admin.id)) == 1


def test_super_admin_request_is_auto_approved(people, directory):
    transition = _create(people.super_admin, directory)
    lr = transition.leave_request

    assert lr.status == LeaveStatus.APPROVED
    assert lr.current_approver_id is None
    assert lr.approval_level == 3
    assert lr.approved_at == NOW
    assert lr.approval_chain == ["Auto-approved"]
    assert [(a.approver_id, a.status) for a in lr.approvals] == [(people.super_admin.id, ApprovalStatus.APPROVED)]
    assert _types(transition, people.hr_hod) == [NotificationType.LEAVE_REQUEST_UPDATE]
    assert _types(transition, people.super_admin) == [NotificationType.LEAVE_RESPONSE]
    assert transition.audits[0].details["auto_approved"] is True


def test_viewer_cannot_request_leave(people, directory):
    with pytest.raises(Forbidden):
        _create(people.viewer, directory)


def test_missing_hr_hod_means_no_approver(people):
    directory = FakeDirectory([people.super_admin, people.mkt_hod])
    with pytest.raises(NoApproverFound):
        _create(people.mkt_hod, directory)


def test_hr_hod_request_without_super_admin_fails(people):
    directory = FakeDirectory([people.hr_hod])
    with pytest.raises(NoApproverFound):
        _create(people.hr_hod, directory)


@pytest.mark.parametrize("start,end,match", [
    (START, START, "End date must be after start date"),
    (END, START, "End date must be after start date"),
    (date(2025, 2, 27), date(2025, 3, 2), "past dates"),
])
def test_invalid_date_ranges(people, directory, start, end, match):
    with pytest.raises(LeaveValidationError, match=match):
        _create(people.eng_staff, directory, start=start, end=end)


def test_start_today_is_allowed(people, directory):
    lr = _create(people.eng_staff, directory, start=NOW.date(), end=NOW.date() + timedelta(days=1)).leave_request
    assert lr.status == LeaveStatus.PENDING


def test_overlap_is_a_conflict(people, directory):
    existing = LeaveRequest(start_date=date(2025, 3, 11), end_date=date(2025, 3, 15))
    with pytest.raises(Conflict, match="overlapping"):
        _create(people.eng_staff, directory, find_overlap=lambda s, e: existing)


# --- approval / rejection ---


def test_department_hod_approval_escalates_to_hr_hod(people, directory):
    lr = _create(people.eng_staff, directory).leave_request

    transition = workflow.plan_decision(lr, people.eng_hod, people.eng_staff, directory, "approve", now=NOW)

    assert transition.before == LeaveStatus.PENDING
    assert lr.status == LeaveStatus.PENDING
    assert lr.current_approver_id == people.hr_hod.id
    assert lr.approval_level == 3
    entries = lr.approvals_by_approver()
    assert entries[people.eng_hod.id].status == ApprovalStatus.APPROVED
    assert entries[people.hr_hod.id].status == ApprovalStatus.PENDING
    assert _types(transition, people.hr_hod) == [NotificationType.LEAVE_REQUEST]
    assert _types(transition, people.eng_staff) == [NotificationType.LEAVE_REQUEST_UPDATE]
    assert transition.audits[0].action == "LEAVE_REQUEST_APPROVED"


def test_peer_hod_approval_does_not_re_escalate(people, directory):
    peer_hod = _person(10, "Ethan", 700, "eng")
    directory.employees.append(peer_hod)
    lr = _create(people.eng_hod, directory).leave_request
    assert lr.current_approver_id == people.hr_hod.id
    assert lr.approval_level == 2

    transition = workflow.plan_decision(lr, peer_hod, people.eng_hod, directory, "approve", now=NOW)

    assert lr.status == LeaveStatus.PENDING
    assert lr.current_approver_id == people.hr_hod.id
    assert lr.approval_level == 2
    entries = lr.approvals_by_approver()
    assert entries[peer_hod.id].status == ApprovalStatus.APPROVED
    assert entries[people.hr_hod.id].status == ApprovalStatus.PENDING
    assert transition.notified(people.hr_hod.id) == []
    assert _types(transition, people.eng_hod) == [NotificationType.LEAVE_REQUEST_UPDATE]
    assert transition.audits[0].action == "LEAVE_REQUEST_APPROVED"

    final = workflow.plan_decision(lr, people.hr_hod, people.eng_hod, directory, "approve", now=NOW)
    assert final.leave_request.status == LeaveStatus.APPROVED


def test_hr_hod_final_approval(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    workflow.plan_decision(lr, people.eng_hod, people.eng_staff, directory, "approve", now=NOW)

    transition = workflow.plan_decision(lr, people.hr_hod, people.eng_staff, directory, "approve", "Enjoy", now=NOW)

    assert lr.status == LeaveStatus.APPROVED
    assert lr.current_approver_id is None
    assert lr.approved_at == NOW
    assert lr.approval_level == 3
    assert len(lr.approvals) == 2
    assert all(a.status == ApprovalStatus.APPROVED for a in lr.approvals)
    assert lr.approvals_by_approver()[people.hr_hod.id].comment == "Enjoy"
    assert _types(transition, people.eng_staff) == [NotificationType.LEAVE_RESPONSE]
    assert _types(transition, people.super_admin) == [NotificationType.LEAVE_RESPONSE]


def test_hr_staff_single_approval_is_final(people, directory):
    lr = _create(people.hr_staff, directory).leave_request
    workflow.plan_decision(lr, people.hr_hod, people.hr_staff, directory, "approve", now=NOW)
    assert lr.status == LeaveStatus.APPROVED
    assert lr.current_approver_id is None


def test_super_admin_override_is_final_without_oversight_copy(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    transition = workflow.plan_decision(lr, people.super_admin, people.eng_staff, directory, "approve", now=NOW)
    assert lr.status == LeaveStatus.APPROVED
    assert transition.notified(people.super_admin.id) == []


def test_hr_hod_rejection_notifies_prior_department_hod(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    workflow.plan_decision(lr, people.eng_hod, people.eng_staff, directory, "approve", now=NOW)

    transition = workflow.plan_decision(lr, people.hr_hod, people.eng_staff, directory, "reject", "Busy period", now=NOW)

    assert lr.status == LeaveStatus.REJECTED
    assert lr.rejected_at == NOW
    assert lr.current_approver_id is None
    requester_note = transition.notified(people.eng_staff.id)[0]
    assert "HR HOD" in requester_note.message
    assert "Busy period" in requester_note.message
    assert requester_note.data["rejection_level"] == "final"
    assert _types(transition, people.eng_hod) == [NotificationType.LEAVE_RESPONSE]
    assert _types(transition, people.super_admin) == [NotificationType.LEAVE_RESPONSE]
    assert transition.audits[0].action == "LEAVE_REQUEST_REJECTED"


def test_department_hod_rejection_message(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    transition = workflow.plan_decision(lr, people.eng_hod, people.eng_staff, directory, "reject", now=NOW)

    note = transition.notified(people.eng_staff.id)[0]
    assert "Department HOD" in note.message
    assert note.data["rejection_level"] == "department"
    assert lr.approvals_by_approver()[people.eng_hod.id].status == ApprovalStatus.REJECTED


def test_cannot_decide_own_request(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    lr.current_approver_id = people.eng_staff.id
    with pytest.raises(Forbidden, match="own"):
        workflow.plan_decision(lr, people.eng_staff, people.eng_staff, directory, "approve", now=NOW)


def test_unrelated_department_hod_is_forbidden(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    with pytest.raises(Forbidden):
        workflow.plan_decision(lr, people.mkt_hod, people.eng_staff, directory, "approve", now=NOW)
    assert lr.status == LeaveStatus.PENDING
    assert len(lr.approvals) == 1


def test_manager_without_override_is_forbidden(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    with pytest.raises(Forbidden, match="not authorized"):
        workflow.plan_decision(lr, people.eng_manager, people.eng_staff, directory, "approve", now=NOW)


def test_decision_on_terminal_request_is_invalid_state(people, directory):
    lr = _create(people.super_admin, directory).leave_request
    with pytest.raises(InvalidState, match="status Approved"):
        workflow.plan_decision(lr, people.hr_hod, people.super_admin, directory, "reject", now=NOW)


def test_unknown_action(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    with pytest.raises(LeaveValidationError):
        workflow.plan_decision(lr, people.eng_hod, people.eng_staff, directory, "escalate", now=NOW)


def test_escalation_without_hr_hod_leaves_request_untouched(people):
    directory = FakeDirectory([people.super_admin, people.eng_hod, people.eng_staff])
    lr = _create(people.eng_staff, directory).leave_request

    with pytest.raises(NoApproverFound):
        workflow.plan_decision(lr, people.eng_hod, people.eng_staff, directory, "approve", now=NOW)

    assert lr.status == LeaveStatus.PENDING
    assert lr.current_approver_id == people.eng_hod.id
    assert lr.approval_level == 2
    assert [a.status for a in lr.approvals] == [ApprovalStatus.PENDING]


# --- authority tables ---


@pytest.mark.parametrize("actor_level,approval_level,expected", [
    (1000, 1, True),
    (1000, 5, True),
    (700, 1, True),
    (700, 2, True),
    (700, 3, False),
    (600, 1, True),
    (600, 2, False),
    (300, 1, False),
])
def test_can_override(actor_level, approval_level, expected):
    assert workflow.can_override(actor_level, approval_level) is expected


def test_can_approve(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    assert workflow.can_approve(people.super_admin, lr)
    assert workflow.can_approve(people.hr_hod, lr)
    assert workflow.can_approve(people.eng_hod, lr)
    assert workflow.can_approve(people.eng_manager, lr)
    assert not workflow.can_approve(people.mkt_hod, lr)
    assert not workflow.can_approve(people.hr_staff, lr)


# --- approval log ---


def test_record_approval_is_idempotent(people, directory):
    lr = _create(people.eng_staff, directory).leave_request

    lr.record_approval(people.eng_hod.id, "HOD", ApprovalStatus.APPROVED, now=NOW)
    lr.record_approval(people.eng_hod.id, "HOD", ApprovalStatus.APPROVED, now=NOW)

    assert len(lr.approvals) == 1
    assert lr.approvals[0].status == ApprovalStatus.APPROVED


def test_record_approval_keeps_terminal_entry_without_new_comment(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    lr.record_approval(people.eng_hod.id, "HOD", ApprovalStatus.APPROVED, "ok", now=NOW)

    lr.record_approval(people.eng_hod.id, "HOD", ApprovalStatus.REJECTED, now=NOW)
    assert lr.approvals[0].status == ApprovalStatus.APPROVED

    lr.record_approval(people.eng_hod.id, "HOD", ApprovalStatus.REJECTED, "changed my mind", now=NOW)
    assert lr.approvals[0].status == ApprovalStatus.REJECTED
    assert lr.approvals[0].comment == "changed my mind"
    assert len(lr.approvals) == 1


# --- update / cancel / delete ---


def test_update_by_owner_notifies_current_approver(people, directory):
    lr = _create(people.eng_staff, directory).leave_request

    transition = workflow.plan_update(
        lr, people.eng_staff, {"reason": "Wedding", "days": Decimal("3"), "end_date": date(2025, 3, 13)},
        find_overlap=no_overlap, now=NOW,
    )

    assert lr.reason == "Wedding"
    assert lr.end_date == date(2025, 3, 13)
    assert lr.approval_chain == ["Department HOD", "HR HOD"]
    assert _types(transition, people.eng_hod) == [NotificationType.LEAVE_REQUEST_UPDATED]
    assert transition.audits[0].action == "LEAVE_REQUEST_UPDATED"


def test_update_revalidates_dates(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    with pytest.raises(LeaveValidationError):
        workflow.plan_update(lr, people.eng_staff, {"end_date": START}, find_overlap=no_overlap, now=NOW)


def test_update_by_someone_else_is_forbidden(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    with pytest.raises(Forbidden):
        workflow.plan_update(lr, people.eng_hod, {"reason": "x"}, find_overlap=no_overlap, now=NOW)


def test_cancel_by_owner(people, directory):
    lr = _create(people.eng_staff, directory).leave_request

    transition = workflow.plan_cancellation(lr, people.eng_staff, "Plans changed", now=NOW)

    assert lr.status == LeaveStatus.CANCELLED
    assert lr.cancelled_at == NOW
    assert lr.cancelled_by_id == people.eng_staff.id
    assert lr.cancellation_reason == "Plans changed"
    assert lr.current_approver_id is None
    assert _types(transition, people.eng_hod) == [NotificationType.LEAVE_CANCELLED]
    assert transition.notified(people.eng_staff.id) == []
    assert transition.audits[0].action == "LEAVE_REQUEST_CANCELLED"


def test_super_admin_cancel_notifies_requester(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    transition = workflow.plan_cancellation(lr, people.super_admin, now=NOW)
    assert _types(transition, people.eng_staff) == [NotificationType.LEAVE_CANCELLED]


def test_cancel_message_names_the_request(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    transition = workflow.plan_cancellation(lr, people.eng_staff, now=NOW)
    message = transition.notified(people.eng_hod.id)[0].message
    assert message.startswith("The Annual leave (2025-03-10 to 2025-03-12) request awaiting your approval")


def test_super_admin_cancelling_request_they_approve_skips_self_notice(people, directory):
    lr = _create(people.hr_hod, directory).leave_request
    assert lr.current_approver_id == people.super_admin.id

    transition = workflow.plan_cancellation(lr, people.super_admin, now=NOW)

    assert lr.status == LeaveStatus.CANCELLED
    assert transition.notified(people.super_admin.id) == []
    assert _types(transition, people.hr_hod) == [NotificationType.LEAVE_CANCELLED]
    assert transition.audits[0].details["previous_approver_id"] == people.super_admin.id


def test_cancel_rules(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    with pytest.raises(Forbidden):
        workflow.plan_cancellation(lr, people.eng_hod, now=NOW)

    workflow.plan_cancellation(lr, people.eng_staff, now=NOW)
    with pytest.raises(InvalidState):
        workflow.plan_cancellation(lr, people.eng_staff, now=NOW)


def test_delete_rules(people, directory):
    lr = _create(people.eng_staff, directory).leave_request
    with pytest.raises(Forbidden):
        workflow.plan_deletion(lr, people.super_admin)

    transition = workflow.plan_deletion(lr, people.eng_staff)
    assert [a.action for a in transition.audits] == ["LEAVE_REQUEST_DELETED"]

    workflow.plan_decision(lr, people.eng_hod, people.eng_staff, directory, "reject", now=NOW)
    with pytest.raises(InvalidState):
        workflow.plan_deletion(lr, people.eng_staff)
