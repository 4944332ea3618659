# Supabase Auth
# This module uses Supabase's built-in authentication system
# Auth identities live in auth.users; the profile lives in public.users
# (see portal/modules/users/models.py) and points back via auth_user_id.

"""
Supabase Auth calls used by the portal:
- auth.admin.create_user() - Register users with the email pre-confirmed
- auth.admin.delete_user() - Roll back an identity when signup fails later on
- auth.admin.update_user_by_id() - Change a password without a live session
- auth.admin.sign_out() - Revoke a session server-side
- auth.sign_in_with_password() - Authenticate users (on a fresh anon client)
- auth.get_user() - Verify a bearer token

Passwords, hashing and token issuance never touch the portal's own tables.
"""
