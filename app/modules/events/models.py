# Supabase table: events
# Managed by admins outside the student app; read-only here except for
# attendance scans recorded against an event (see app.modules.attendance).

"""
Expected Supabase table structure:
- id: int8 (primary key)
- name: text (not null)
- description: text (nullable)
- location: text (not null)
- banner: text (nullable) - Cloudinary image URL
- status: int2 (not null) - 1 active, 0 inactive
- start_datetime: timestamptz (not null)
- end_datetime: timestamptz (not null)
- created_at: timestamp (default: now())
"""
