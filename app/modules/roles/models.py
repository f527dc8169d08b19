# Supabase tables: user_roles, audit_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null, unique)
- role: app_role enum ('admin' | 'user', not null)
- created_at: timestamp (default: now())
- unique constraint on (user_id): role changes are upserts, so a user always has exactly one row

audit_logs (append-only):
- id: uuid (primary key)
- admin_user_id: uuid (nullable) - actor
- admin_email: text (nullable)
- target_user_id: uuid (not null)
- target_email: text (nullable)
- action: text (not null) - promote_to_admin, demote_to_user, set_role
- old_role: app_role (nullable) - as passed by the caller, not re-verified
- new_role: app_role (nullable)
- created_at: timestamp (default: now())
"""
