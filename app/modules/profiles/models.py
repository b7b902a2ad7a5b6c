# Supabase table: user_profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

user_profiles:
- id: uuid (primary key, references auth.users.id)
- first_name: text (not null)
- middle_name: text (nullable)
- last_name: text (not null)
- student_id: text (not null) - school issued id, shown on the QR code
- course_id: int8 (foreign key to courses.id)
- year_level: int2 (1-5)
- role_id: int2 (0 admin, 1 student, 2 scanner; see app.config.roles_config)
- avatar: text (nullable) - Cloudinary secure_url or OAuth picture URL
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

A row is inserted exactly once, by POST /setup-profile. Without it a
signed-in user is signed out on every non auth page.
"""
