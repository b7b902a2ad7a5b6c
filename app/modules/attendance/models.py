# Supabase table: attendance
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: int8 (primary key)
- event_id: int8 (foreign key to events.id, not null)
- student_id: uuid (foreign key to user_profiles.id, not null)
- time_in: timestamptz (nullable) - set by the first time_in scan
- time_out: timestamptz (nullable) - set by the first time_out scan
- created_at: timestamp (default: now())

One row per (event_id, student_id). Students only read their own rows;
scanner and admin roles write them through POST /events/{id}/attendance.
"""
