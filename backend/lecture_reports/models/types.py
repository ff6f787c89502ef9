"""
Closed enumerations shared by models, schemas and the authorization policy.
Roles are stored as their string value so the column stays readable in any backend.
"""
import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    PRINCIPAL_LECTURER = "principal_lecturer"
    PROGRAM_LEADER = "program_leader"
    LECTURER = "lecturer"
    STUDENT = "student"

    @classmethod
    def values(cls) -> list[str]:
        return [r.value for r in cls]


ALL_ROLES = frozenset(Role)


def role_check_sql(column: str = "role") -> str:
    """SQL CHECK expression restricting column to the five role values."""
    quoted = ", ".join(f"'{v}'" for v in Role.values())
    return f"{column} IN ({quoted})"
