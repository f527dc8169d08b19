# Supabase table: events
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- title: text (not null)
- description: text (nullable)
- detailed_description: text (nullable)
- event_date: timestamp (nullable)
- status: text (not null, default: 'upcoming') - values: upcoming, ongoing, completed (admin-driven)
- registration_status: text (default: 'open') - values: open, paused, closed
- max_participants: integer (nullable) - no limit when null
- organizer: text (nullable)
- players_count: text (nullable) - free-form label shown on the card, e.g. "24-48"
- featured: boolean (default: false)
- image_url: text (nullable) - public URL of the uploaded cover image
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
