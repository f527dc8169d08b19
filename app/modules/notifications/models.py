# Supabase table: notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null) - recipient
- title: text (not null)
- message: text (not null)
- type: text (not null) - info, event, warning
- read: boolean (default: false)
- event_id: uuid (foreign key to events.id, nullable)
- created_at: timestamp (default: now())

Rows are written by fan-out: one row per recipient, one batch insert per trigger.
There is no deduplication; triggering twice notifies twice.
"""
