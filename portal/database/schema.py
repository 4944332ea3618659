"""
Idempotent schema and row-level-security bootstrap.

Supabase's PostgREST API cannot run DDL, so every statement goes through an
``exec_sql(sql text)`` SQL function that must already exist in the project:

    create or replace function public.exec_sql(sql text) returns void
    language plpgsql security definer as $$ begin execute sql; end $$;

Statements are ordered by dependency: roles before users (users.role_id),
users before complaints, tables before the policies that reference them.
"""

from supabase import Client
from portal.core.exceptions import PersistenceError
import logging

logger = logging.getLogger(__name__)


ROLES_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS public.roles (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    role_name VARCHAR(100) NOT NULL,
    department_name VARCHAR(100) NOT NULL,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
    UNIQUE(role_name, department_name)
);
"""

USERS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS public.users (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    auth_user_id UUID REFERENCES auth.users(id) ON DELETE CASCADE,
    email VARCHAR(255) UNIQUE NOT NULL,
    name VARCHAR(255) NOT NULL,
    role_id UUID REFERENCES public.roles(id),
    is_active BOOLEAN DEFAULT true,
    preferences JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
    updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);
ALTER TABLE public.users ADD COLUMN IF NOT EXISTS preferences JSONB NOT NULL DEFAULT '{}'::jsonb;
"""

COMPLAINTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS public.complaints (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID REFERENCES public.users(id) ON DELETE SET NULL,
    role_id UUID REFERENCES public.roles(id) ON DELETE SET NULL,
    department_name TEXT NOT NULL,
    category TEXT NOT NULL,
    priority TEXT NOT NULL CHECK (priority IN ('Low','Medium','High','Urgent')) DEFAULT 'Medium',
    subject TEXT NOT NULL,
    description TEXT NOT NULL,
    attachments_urls JSONB NOT NULL DEFAULT '[]'::jsonb,
    is_anonymous BOOLEAN NOT NULL DEFAULT false,
    status TEXT NOT NULL CHECK (status IN ('open','in_progress','resolved','closed')) DEFAULT 'open',
    assigned_to UUID REFERENCES public.users(id) ON DELETE SET NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

SECURITY_POLICIES_SQL = """
create or replace function public.current_user_role_and_dept()
returns table(role_id uuid, role_name text, department_name text, public_user_id uuid)
language sql
security definer
set search_path = public
as $$
  select r.id, r.role_name, r.department_name, u.id
  from public.users u
  join public.roles r on r.id = u.role_id
  where u.auth_user_id = auth.uid()
$$;

alter table if exists public.users enable row level security;
alter table if exists public.roles enable row level security;
alter table if exists public.complaints enable row level security;

DO $$
BEGIN
  IF NOT EXISTS (
    SELECT 1 FROM pg_policies WHERE schemaname = 'public' AND tablename = 'users' AND policyname = 'users_select_self'
  ) THEN
    CREATE POLICY users_select_self ON public.users
    FOR SELECT TO authenticated
    USING (auth.uid() = auth_user_id);
  END IF;
END $$;

DO $$
BEGIN
  IF NOT EXISTS (
    SELECT 1 FROM pg_policies WHERE schemaname = 'public' AND tablename = 'roles' AND policyname = 'roles_select_all'
  ) THEN
    CREATE POLICY roles_select_all ON public.roles
    FOR SELECT TO authenticated
    USING (true);
  END IF;
END $$;

DO $$
BEGIN
  IF NOT EXISTS (
    SELECT 1 FROM pg_policies WHERE schemaname = 'public' AND tablename = 'complaints' AND policyname = 'complaints_select_all'
  ) THEN
    CREATE POLICY complaints_select_all ON public.complaints
    FOR SELECT TO authenticated
    USING (true);
  END IF;
END $$;

DO $$
BEGIN
  IF NOT EXISTS (
    SELECT 1 FROM pg_policies WHERE schemaname = 'public' AND tablename = 'complaints' AND policyname = 'complaints_insert_by_role_and_dept'
  ) THEN
    CREATE POLICY complaints_insert_by_role_and_dept ON public.complaints
    FOR INSERT TO authenticated
    WITH CHECK (
      EXISTS (
        SELECT 1
        FROM public.current_user_role_and_dept() AS cur
        WHERE cur.public_user_id = public.complaints.user_id
          AND cur.department_name = public.complaints.department_name
      )
    );
  END IF;
END $$;
"""

BOOTSTRAP_STATEMENTS = [
    ("roles", ROLES_TABLE_SQL),
    ("users", USERS_TABLE_SQL),
    ("complaints", COMPLAINTS_TABLE_SQL),
    ("security policies", SECURITY_POLICIES_SQL),
]


class SchemaBootstrap:
    """Runs the bootstrap statements once per process, on the first request that needs them."""

    _ready: bool = False

    @classmethod
    def ensure(cls, supabase: Client) -> None:
        if cls._ready:
            return
        logger.info("Ensuring database tables and policies exist")
        for label, sql in BOOTSTRAP_STATEMENTS:
            try:
                supabase.rpc("exec_sql", {"sql": sql}).execute()
            except Exception as e:
                logger.error(f"Failed to bootstrap {label}: {e}")
                raise
        cls._ready = True
        logger.info("Database tables and policies are ready")

    @classmethod
    def reset(cls):
        cls._ready = False


def ensure_schema(supabase: Client) -> None:
    try:
        SchemaBootstrap.ensure(supabase)
    except Exception as e:
        raise PersistenceError(f"Failed to prepare database: {e}")
