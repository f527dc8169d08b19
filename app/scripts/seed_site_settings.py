"""
Seed Site Settings Script
Inserts the default site settings that are missing (existing values are left alone)
and optionally grants the admin role to a user by email.

    python app/scripts/seed_site_settings.py --admin owner@example.com
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.core.dependencies import ADMIN_ROLE
from app.database.supabase_client import get_service_supabase
from app.modules.roles.service import ACTION_PROMOTE, RoleService
from app.modules.site_settings.store import (
    KNOWN_SETTINGS, DEFAULT_TITLE, DEFAULT_DESCRIPTION, DEFAULT_OG_IMAGE
)
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# audit_logs actor for role changes made from the command line
SEED_ACTOR = {"id": None, "email": "seed-script"}

DEFAULT_VALUES = {
    "primary_color": "189 94% 43%",
    "og_title": DEFAULT_TITLE,
    "og_description": DEFAULT_DESCRIPTION,
    "og_image": DEFAULT_OG_IMAGE,
}


def seed_site_settings(supabase: Client) -> int:
    """Insert every known setting that has no row yet"""
    logger.info("Seeding site settings...")

    existing = supabase.table("site_settings").select("setting_key").execute()
    existing_keys = {row["setting_key"] for row in existing.data or []}

    new_rows = [
        {
            "setting_key": key,
            "setting_value": DEFAULT_VALUES.get(key, ""),
            "setting_type": setting_type
        }
        for key, setting_type in KNOWN_SETTINGS.items()
        if key not in existing_keys
    ]
    if new_rows:
        supabase.table("site_settings").insert(new_rows).execute()

    logger.info(f"Site settings seeded: {len(new_rows)} created, {len(existing_keys)} already present")
    return len(new_rows)


def grant_admin(supabase: Client, email: str) -> bool:
    """Give the admin role to the user with this email, through the audited role change"""
    profile = supabase.table("profiles")\
        .select("id")\
        .eq("email", email)\
        .execute()
    if not profile.data:
        logger.error(f"No user found with email {email}")
        return False

    user_id = profile.data[0]["id"]
    roles = RoleService(supabase)
    current_role = roles.get_user_role(user_id)
    if current_role == ADMIN_ROLE:
        logger.info(f"{email} is already an admin")
        return True

    roles.set_role(SEED_ACTOR, user_id, ADMIN_ROLE, current_role, action=ACTION_PROMOTE)
    logger.info(f"Granted admin to {email}")
    return True


def main(argv=None):
    """Main function to seed site settings and the first admin"""
    parser = argparse.ArgumentParser(description="Seed default site settings")
    parser.add_argument("--admin", metavar="EMAIL", help="grant the admin role to this user")
    args = parser.parse_args(argv)

    try:
        supabase = get_service_supabase()
        seed_site_settings(supabase)
        if args.admin and not grant_admin(supabase, args.admin):
            sys.exit(1)
        logger.info("Seeding completed successfully!")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
