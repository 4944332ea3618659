"""
Bootstrap Schema and Seed Roles Script
Creates the portal tables/policies and populates the roles table from
portal/config/departments.py. Safe to re-run: existing roles are left alone.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from portal.config.departments import DEPARTMENT_ROLES
from portal.database.schema import ensure_schema
from portal.database.supabase_client import get_supabase
from portal.modules.roles.service import RoleService
from supabase import Client
from typing import Dict, List
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_roles(supabase: Client, department_roles: Dict[str, List[str]] = DEPARTMENT_ROLES) -> int:
    """Ensure every configured (role, department) pair exists; returns pairs processed"""
    logger.info("Seeding roles...")
    service = RoleService(supabase)
    processed = 0

    for department_name, role_names in department_roles.items():
        for role_name in role_names:
            try:
                service.get_or_create_role(role_name, department_name)
                processed += 1
            except Exception as e:
                logger.error(f"Error processing role {role_name!r} in {department_name!r}: {e}")

    logger.info(f"Roles seeded: {processed} processed")
    return processed


def main():
    """Main function to bootstrap the schema and seed roles"""
    try:
        supabase = get_supabase()

        logger.info("Bootstrapping schema...")
        ensure_schema(supabase)

        role_count = seed_roles(supabase)

        logger.info("Seeding completed successfully!")
        logger.info(f"Total: {role_count} roles processed")

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
