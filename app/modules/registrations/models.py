"""
Database models for the event_registrations table.

Rows are written through the register_for_event() SQL function so the capacity
check and the insert happen under one lock on the event row. The
(event_id, user_id) unique constraint backs the duplicate check.
"""
