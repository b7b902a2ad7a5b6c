"""
Roles Configuration
Role ids stored in user_profiles.role_id and the pages each role lands on.
"""

ROLE_ADMIN = 0
ROLE_STUDENT = 1
ROLE_SCANNER = 2

ROLES = {
    ROLE_ADMIN: {
        "name": "admin",
        "description": "Manages events and attendance records",
    },
    ROLE_STUDENT: {
        "name": "student",
        "description": "Attends events and reviews their own attendance",
    },
    ROLE_SCANNER: {
        "name": "scanner",
        "description": "Records attendance scans at events",
    },
}

# Roles allowed to write attendance scans
CHECK_IN_ROLES = (ROLE_ADMIN, ROLE_SCANNER)

# New profiles are always students
DEFAULT_ROLE_ID = ROLE_STUDENT

YEAR_LEVELS = (1, 2, 3, 4, 5)


def get_role_name(role_id) -> str:
    role = ROLES.get(role_id)
    return role["name"] if role else "unknown"
