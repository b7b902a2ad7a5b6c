# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - Password and Google OAuth sign in
# - Session issuance and refresh (access + refresh tokens)
# - Password reset e-mails

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (first/last name kept in user_metadata)
- auth.sign_in_with_password() - Authenticate users
- auth.sign_in_with_oauth() - Start the Google redirect (PKCE flow)
- auth.exchange_code_for_session() - Finish the Google redirect on /auth/callback
- auth.set_session() / auth.get_session() - Restore a session from cookies
- auth.refresh_session() - Rotate tokens
- auth.sign_out() - Logout users

Sessions travel between browser and server in two httpOnly cookies:
sb-access-token and sb-refresh-token.
A signed-in user only counts as fully authenticated once a user_profiles row
exists for them (see app.modules.profiles).
"""
