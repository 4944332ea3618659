# Supabase tables: users, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, generated)
- auth_user_id: uuid (references auth.users.id, on delete cascade)
- email: varchar(255) (unique, not null)
- name: varchar(255) (not null)
- role_id: uuid (references roles.id, nullable)
- is_active: boolean (default: true)
- preferences: jsonb (default: {}) - e.g. {"theme": "dark"}
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Note: credentials live only in auth.users, managed by Supabase Auth.
This table holds the profile and is joined with roles through role_id.
Rows are never hard-deleted by the application.
"""
