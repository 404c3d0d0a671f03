# Supabase table: user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null, unique)
- role: text (not null) - e.g., "admin", "member"
- created_at: timestamp (default: now())

Rows are managed outside this application (dashboard or SQL). The portal
only reads the role of the signed-in user.
"""
