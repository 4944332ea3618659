"""
Departments and the roles offered for each on the signup form.

Signup creates any (role, department) pair on demand, so this list is only
used to pre-seed the roles table (portal/scripts/seed_roles.py).
"""

DEPARTMENT_ROLES = {
    "Techlab": ["software engineer", "team lead", "manager", "admin"],
    "BPO": ["agent", "player", "admin", "executives"],
}
