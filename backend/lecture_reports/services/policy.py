"""
Authorization policy: who may perform which action on which resource, and which roles are narrowed to rows they own.

POLICY is the single allow-set table consulted by every protected route (through api.deps.allow).
OWNERSHIP declares, per (resource, action), the owner column and the roles scoped to it. A scoped caller
only ever sees rows whose owner column equals their subject id; the filter is added when the query is
built (scope_query), never by filtering a full result set afterwards.
"""
import enum
import logging
from dataclasses import dataclass

from lecture_reports.errors import Forbidden
from lecture_reports.models.types import ALL_ROLES, Role

logger = logging.getLogger(__name__)


class Resource(str, enum.Enum):
    USER = "user"
    COURSE = "course"
    CLASS = "class"
    FACULTY = "faculty"
    LECTURE = "lecture"
    FEEDBACK = "feedback"
    RATING = "rating"
    LECTURER_ASSIGNMENT = "lecturer_assignment"
    PROGRAM_REPORT = "program_report"
    MONITORING = "monitoring"


class Action(str, enum.Enum):
    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    # Unscoped listing used to fill lecture-report forms (/all-courses, /all-classes)
    CATALOG = "catalog"
    LIST_BY_CLASS = "list_by_class"
    LIST_BY_COURSE = "list_by_course"
    # Ratings: aggregate summary vs. the caller's own rows
    SUMMARY = "summary"
    READ_OWN = "read_own"
    LIST_OWN = "list_own"
    UPSERT = "upsert"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, taken from the token only (no database lookup)."""

    id: int
    role: Role


@dataclass(frozen=True)
class OwnerRule:
    owner_field: str
    scoped_roles: frozenset


A = Role.ADMIN
PL = Role.PRINCIPAL_LECTURER
PG = Role.PROGRAM_LEADER
L = Role.LECTURER
S = Role.STUDENT

POLICY: dict[tuple[Resource, Action], frozenset] = {
    (Resource.USER, Action.LIST): frozenset({A, PL}),
    (Resource.USER, Action.READ): ALL_ROLES,

    (Resource.COURSE, Action.LIST): frozenset({A, PL, PG}),
    (Resource.COURSE, Action.READ): frozenset({A, PL, PG}),
    (Resource.COURSE, Action.CATALOG): frozenset({L, PL, A}),
    (Resource.COURSE, Action.CREATE): frozenset({PG}),
    (Resource.COURSE, Action.UPDATE): frozenset({PG}),
    (Resource.COURSE, Action.DELETE): frozenset({PG}),

    (Resource.CLASS, Action.LIST): ALL_ROLES,
    (Resource.CLASS, Action.READ): ALL_ROLES,
    (Resource.CLASS, Action.CATALOG): frozenset({L, PL, A}),
    (Resource.CLASS, Action.CREATE): frozenset({A, PL, PG}),
    (Resource.CLASS, Action.UPDATE): frozenset({A, PL, PG}),
    (Resource.CLASS, Action.DELETE): frozenset({A, PL, PG}),

    (Resource.FACULTY, Action.LIST): frozenset({A, PL, PG}),
    (Resource.FACULTY, Action.READ): frozenset({A, PL, PG}),

    (Resource.LECTURE, Action.LIST): ALL_ROLES,
    (Resource.LECTURE, Action.LIST_BY_CLASS): frozenset({A, PL, L, S}),
    (Resource.LECTURE, Action.LIST_BY_COURSE): frozenset({A, PL}),
    (Resource.LECTURE, Action.READ): frozenset({A, PL, L, S}),
    (Resource.LECTURE, Action.CREATE): frozenset({L}),
    (Resource.LECTURE, Action.UPDATE): frozenset({L, A}),
    (Resource.LECTURE, Action.DELETE): frozenset({L, A}),

    (Resource.FEEDBACK, Action.LIST): frozenset({A, PL, L, S}),
    (Resource.FEEDBACK, Action.CREATE): frozenset({L, PL}),

    (Resource.RATING, Action.SUMMARY): ALL_ROLES,
    (Resource.RATING, Action.READ_OWN): frozenset({S}),
    (Resource.RATING, Action.LIST_OWN): frozenset({S}),
    (Resource.RATING, Action.UPSERT): frozenset({S}),

    (Resource.LECTURER_ASSIGNMENT, Action.LIST): frozenset({A, PL}),
    (Resource.LECTURER_ASSIGNMENT, Action.CREATE): frozenset({A, PL}),

    (Resource.PROGRAM_REPORT, Action.READ): frozenset({PG}),
    (Resource.MONITORING, Action.READ): ALL_ROLES,
}

_COURSE_OWNER = OwnerRule("program_leader_id", frozenset({PG}))
_LECTURE_OWNER = OwnerRule("lecturer_id", frozenset({L}))
_RATING_OWNER = OwnerRule("user_id", frozenset({S}))

OWNERSHIP: dict[tuple[Resource, Action], OwnerRule] = {
    (Resource.COURSE, Action.LIST): _COURSE_OWNER,
    (Resource.COURSE, Action.READ): _COURSE_OWNER,
    (Resource.COURSE, Action.UPDATE): _COURSE_OWNER,
    (Resource.COURSE, Action.DELETE): _COURSE_OWNER,

    (Resource.LECTURE, Action.LIST): _LECTURE_OWNER,
    (Resource.LECTURE, Action.LIST_BY_CLASS): _LECTURE_OWNER,
    (Resource.LECTURE, Action.READ): _LECTURE_OWNER,
    (Resource.LECTURE, Action.UPDATE): _LECTURE_OWNER,
    (Resource.LECTURE, Action.DELETE): _LECTURE_OWNER,

    (Resource.RATING, Action.READ_OWN): _RATING_OWNER,
    (Resource.RATING, Action.LIST_OWN): _RATING_OWNER,
    (Resource.RATING, Action.UPSERT): _RATING_OWNER,

    # The program report is keyed by the program leader's own user id
    (Resource.PROGRAM_REPORT, Action.READ): OwnerRule("program_leader_id", frozenset({PG})),
    (Resource.MONITORING, Action.READ): _LECTURE_OWNER,
}

# Roles that may read one class only when an assignment row links them to it
ASSIGNMENT_GATED: dict[tuple[Resource, Action], frozenset] = {
    (Resource.CLASS, Action.READ): frozenset({L}),
}


def allowed_roles(resource: Resource, action: Action) -> frozenset:
    """Allow-set for an operation. Operations missing from the table allow nobody."""
    return POLICY.get((resource, action), frozenset())


def is_allowed(role: Role, resource: Resource, action: Action) -> bool:
    return role in allowed_roles(resource, action)


def authorize(principal: Principal, resource: Resource, action: Action) -> None:
    """Raise Forbidden unless the caller's role is in the allow-set."""
    if not is_allowed(principal.role, resource, action):
        logger.info(
            "Denied %s %s for user_id=%s role=%s", action.value, resource.value, principal.id, principal.role.value
        )
        raise Forbidden("Access denied")


def owner_rule(resource: Resource, action: Action) -> OwnerRule | None:
    return OWNERSHIP.get((resource, action))


def is_scoped(principal: Principal, resource: Resource, action: Action) -> bool:
    """True when the caller may only touch rows they own for this operation."""
    rule = owner_rule(resource, action)
    return rule is not None and principal.role in rule.scoped_roles


def owns_value(principal: Principal, resource: Resource, action: Action, owner_id) -> bool:
    """Ownership test against a bare owner id. Unscoped callers own everything they are allowed to reach."""
    if not is_scoped(principal, resource, action):
        return True
    return owner_id == principal.id


def owns(principal: Principal, resource: Resource, action: Action, row) -> bool:
    """Ownership test for one row, reading the rule's owner column."""
    rule = owner_rule(resource, action)
    owner_id = getattr(row, rule.owner_field, None) if rule else None
    return owns_value(principal, resource, action, owner_id)


def requires_assignment(principal: Principal, resource: Resource, action: Action) -> bool:
    return principal.role in ASSIGNMENT_GATED.get((resource, action), frozenset())


def scope_query(query, model, principal: Principal, resource: Resource, action: Action):
    """Narrow query to the caller's own rows when their role is scoped for this operation."""
    if not is_scoped(principal, resource, action):
        return query
    rule = owner_rule(resource, action)
    return query.filter(getattr(model, rule.owner_field) == principal.id)
