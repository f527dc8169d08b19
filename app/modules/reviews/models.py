"""
Database models for the event_reviews table. One review per (event_id, user_id);
only users whose registration is marked attended may write one.
"""
