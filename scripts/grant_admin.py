#!/usr/bin/env python3
"""
Admin Role Utility

Promotes a registered user to ADMIN (or demotes back to USER) so they can
use the admin dashboard endpoints.

Usage:
    python scripts/grant_admin.py --email <email> [--revoke]

Example:
    python scripts/grant_admin.py --email staff@shift.example
"""

import argparse
import os
import sys

# Add the parent directory to the path so we can import our modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import SessionLocal
from models.profile import Profile
from utils.logger_factory import new_logger


def set_role(db, email: str, role: str) -> Profile:
    """Set the role of the profile registered under `email`. Raises LookupError if none."""
    log = new_logger("set_role")
    profile = db.query(Profile).filter_by(email=email.strip().lower()).first()
    if not profile:
        raise LookupError(f"No registered user with email {email}")
    previous = profile.role
    profile.role = role
    db.commit()
    db.refresh(profile)
    log.info(f"Changed role of {profile.public_id} ({profile.email}) from {previous} to {role}")
    return profile


def main(argv=None):
    parser = argparse.ArgumentParser(description="Grant or revoke the ADMIN role.")
    parser.add_argument("--email", required=True, help="Email of the registered user")
    parser.add_argument("--revoke", action="store_true", help="Demote the user back to USER")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        set_role(db, args.email, "USER" if args.revoke else "ADMIN")
    except LookupError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
