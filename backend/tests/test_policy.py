"""Unit tests for the authorization table and ownership helpers (no database, no HTTP)."""
from types import SimpleNamespace

import pytest

from lecture_reports.errors import Forbidden
from lecture_reports.models.types import ALL_ROLES, Role
from lecture_reports.services import policy
from lecture_reports.services.policy import Action, Principal, Resource

A, PL, PG, L, S = Role.ADMIN, Role.PRINCIPAL_LECTURER, Role.PROGRAM_LEADER, Role.LECTURER, Role.STUDENT

# Expected allow-sets, written out independently of POLICY
EXPECTED = {
    (Resource.USER, Action.LIST): {A, PL},
    (Resource.USER, Action.READ): set(Role),
    (Resource.COURSE, Action.LIST): {A, PL, PG},
    (Resource.COURSE, Action.READ): {A, PL, PG},
    (Resource.COURSE, Action.CREATE): {PG},
    (Resource.COURSE, Action.UPDATE): {PG},
    (Resource.COURSE, Action.DELETE): {PG},
    (Resource.CLASS, Action.LIST): set(Role),
    (Resource.CLASS, Action.READ): set(Role),
    (Resource.CLASS, Action.CREATE): {A, PL, PG},
    (Resource.CLASS, Action.UPDATE): {A, PL, PG},
    (Resource.CLASS, Action.DELETE): {A, PL, PG},
    (Resource.LECTURE, Action.LIST): set(Role),
    (Resource.LECTURE, Action.READ): {A, PL, L, S},
    (Resource.LECTURE, Action.CREATE): {L},
    (Resource.LECTURE, Action.UPDATE): {L, A},
    (Resource.LECTURE, Action.DELETE): {L, A},
    (Resource.FEEDBACK, Action.LIST): {A, PL, L, S},
    (Resource.FEEDBACK, Action.CREATE): {L, PL},
    (Resource.RATING, Action.SUMMARY): set(Role),
    (Resource.RATING, Action.UPSERT): {S},
    (Resource.LECTURER_ASSIGNMENT, Action.LIST): {A, PL},
    (Resource.LECTURER_ASSIGNMENT, Action.CREATE): {A, PL},
}


@pytest.mark.parametrize("key", sorted(EXPECTED, key=lambda k: (k[0].value, k[1].value)))
def test_policy_matches_matrix(key):
    assert set(policy.allowed_roles(*key)) == EXPECTED[key]


@pytest.mark.parametrize("role", list(Role))
def test_authorize_raises_for_every_role_outside_allow_set(role):
    p = Principal(id=1, role=role)
    for (resource, action), allowed in EXPECTED.items():
        if role in allowed:
            policy.authorize(p, resource, action)
        else:
            with pytest.raises(Forbidden):
                policy.authorize(p, resource, action)


def test_unknown_operation_allows_nobody():
    assert policy.allowed_roles(Resource.FACULTY, Action.DELETE) == frozenset()
    with pytest.raises(Forbidden):
        policy.authorize(Principal(1, Role.ADMIN), Resource.FACULTY, Action.DELETE)


def test_all_roles_constant_covers_enum():
    assert ALL_ROLES == frozenset(Role)
    assert set(Role.values()) == {"admin", "principal_lecturer", "program_leader", "lecturer", "student"}


def test_program_leader_is_scoped_on_courses_but_admin_is_not():
    assert policy.is_scoped(Principal(1, PG), Resource.COURSE, Action.LIST)
    assert not policy.is_scoped(Principal(1, A), Resource.COURSE, Action.LIST)
    assert not policy.is_scoped(Principal(1, PL), Resource.COURSE, Action.READ)


def test_lecture_ownership_admin_bypasses_lecturer_does_not():
    row = SimpleNamespace(lecturer_id=7)
    assert policy.owns(Principal(7, L), Resource.LECTURE, Action.UPDATE, row)
    assert not policy.owns(Principal(8, L), Resource.LECTURE, Action.UPDATE, row)
    assert policy.owns(Principal(99, A), Resource.LECTURE, Action.UPDATE, row)


def test_owns_value_for_program_report():
    assert policy.owns_value(Principal(3, PG), Resource.PROGRAM_REPORT, Action.READ, 3)
    assert not policy.owns_value(Principal(3, PG), Resource.PROGRAM_REPORT, Action.READ, 4)


def test_class_read_requires_assignment_only_for_lecturers():
    assert policy.requires_assignment(Principal(1, L), Resource.CLASS, Action.READ)
    for role in (A, PL, PG, S):
        assert not policy.requires_assignment(Principal(1, role), Resource.CLASS, Action.READ)


class _FakeQuery:
    def __init__(self):
        self.filters = []

    def filter(self, clause):
        self.filters.append(clause)
        return self


def test_scope_query_adds_owner_filter_only_when_scoped():
    from lecture_reports.models.lecture import Lecture

    q = policy.scope_query(_FakeQuery(), Lecture, Principal(5, L), Resource.LECTURE, Action.LIST)
    assert len(q.filters) == 1
    assert q.filters[0].right.value == 5

    q = policy.scope_query(_FakeQuery(), Lecture, Principal(5, S), Resource.LECTURE, Action.LIST)
    assert q.filters == []
