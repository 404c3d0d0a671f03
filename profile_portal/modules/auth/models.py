# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User login and session management
# - JWT token issue and refresh
# - Password hashing and security

"""
Supabase Auth provides (async client):
- auth.get_session() - Current session held by the client, if any
- auth.on_auth_state_change() - Subscribe to SIGNED_IN / SIGNED_OUT / TOKEN_REFRESHED
- auth.sign_in_with_password() - Authenticate users
- auth.sign_out() - Logout users

Each browser session owns one client, so the session returned by
get_session() is that browser's session. Authorization data (the admin
role) lives in the user_roles table, see modules/roles/models.py.
"""
