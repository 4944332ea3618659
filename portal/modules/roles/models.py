# Supabase table: roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL lives in portal/database/schema.py (ROLES_TABLE_SQL)

"""
Expected Supabase table structure:

roles:
- id: uuid (primary key)
- role_name: varchar(100) (not null) - e.g., "agent", "team lead"
- department_name: varchar(100) (not null) - e.g., "BPO", "Techlab"
- created_at: timestamp (default: now())
- unique constraint on (role_name, department_name)

Rows are append-only: a role is created the first time a signup names an
unseen (role_name, department_name) pair and is never updated or deleted.
"""
