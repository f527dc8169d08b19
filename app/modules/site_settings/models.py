"""
Database models for the site_settings table.

One row per setting_key (unique). setting_value is always text; setting_type
tells the admin UI how to edit it (color, image, video, text).
"""
