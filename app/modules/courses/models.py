# Supabase table: courses
# Reference data maintained outside this app; read-only here.

"""
Expected Supabase table structure:
- id: int8 (primary key)
- course_name: text (not null)
- short: text (nullable) - abbreviation, e.g. "BSIT"
"""
