# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- name: text (nullable)
- profession: text (nullable)
- phone: text (nullable)
- image_url: text (nullable)
- social_links: jsonb (nullable) - {"linkedin": "", "twitter": "", "github": ""}
- updated_at: timestamp (nullable)

Row level security is expected to restrict reads and writes to the row
whose id matches auth.uid(). Rows are created by the first upsert and are
never deleted by the portal.
"""
