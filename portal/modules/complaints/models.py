# Supabase table: complaints
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL and RLS policies live in portal/database/schema.py

"""
Expected Supabase table structure:
- id: uuid (primary key) - generated by the API so attachments can be stored under it first
- user_id: uuid (foreign key to users.id, nullable on delete)
- role_id: uuid (foreign key to roles.id, nullable on delete)
- department_name: text (not null) - must equal the submitter's role department (RLS insert check)
- category: text (not null)
- priority: text (not null, default: 'Medium') - values: Low, Medium, High, Urgent
- subject: text (not null)
- description: text (not null)
- attachments_urls: jsonb (not null, default: []) - public URLs in the complaints bucket
- is_anonymous: boolean (not null, default: false)
- status: text (not null, default: 'open') - values: open, in_progress, resolved, closed
- assigned_to: uuid (foreign key to users.id, nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())

status and assigned_to are stored but no route changes them yet.

Storage: bucket "complaints" (public, 20 MB per object),
object path "<complaint_id>/<epoch_ms>_<sanitized filename>".
"""
