"""
Database models for the team_members table (public team page, ordered by display_order).
"""
