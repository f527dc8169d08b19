"""
Database models for the event_gallery table. Images are stored under the
"gallery" upload folder; rows hold the public URL.
"""
