#!/usr/bin/env python
"""Idempotent seed script for the access-code configuration and an initial admin.

Usage:
    python scripts/seed_access_codes.py                      # codes from ADMIN_ACCESS_CODE / TECH_ACCESS_CODE
    python scripts/seed_access_codes.py --admin-code A --tech-code T
    python scripts/seed_access_codes.py --show               # print the stored codes after seeding
    python scripts/seed_access_codes.py --dry-run            # run logic then rollback (no DB changes)
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('.'))

from repairdesk import create_app, get_db  # type: ignore
from repairdesk.constants.roles import ACCESS_CONFIG_ID, ROLE_ADMIN
from repairdesk.models.access_config import AccessConfig
from repairdesk.models.user import User


def ensure_codes(session, admin_code: str, tech_code: str) -> bool:
    cfg = session.get(AccessConfig, ACCESS_CONFIG_ID)
    if cfg is None:
        session.add(AccessConfig(id=ACCESS_CONFIG_ID, admin_code=admin_code, tech_code=tech_code))
        return True
    changed = (cfg.admin_code, cfg.tech_code) != (admin_code, tech_code)
    cfg.admin_code = admin_code
    cfg.tech_code = tech_code
    return changed


def ensure_initial_admin(session):
    admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com').lower()
    existing_admin = session.execute(select(User).where(User.email==admin_email)).scalar_one_or_none()
    if existing_admin:
        return
    user = User(dni='', email=admin_email, first_name='Admin', last_name='', role=ROLE_ADMIN)
    user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(user)
    print(f"[INFO] Created initial admin user {admin_email} with temporary password.")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed access codes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed from env: seed_access_codes.py\n  dry run: seed_access_codes.py --dry-run\n""")
    )
    p.add_argument('--admin-code', help='Code unlocking the Admin role (default: $ADMIN_ACCESS_CODE)')
    p.add_argument('--tech-code', help='Code unlocking the Technician role (default: $TECH_ACCESS_CODE)')
    p.add_argument('--no-admin', action='store_true', help='Skip creating the initial admin user')
    p.add_argument('--show', action='store_true', help='Print stored codes after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    admin_code = args.admin_code or app.config.get('ADMIN_ACCESS_CODE')
    tech_code = args.tech_code or app.config.get('TECH_ACCESS_CODE')
    if not admin_code or not tech_code:
        print('[ERROR] admin and technician codes required (flags or ADMIN_ACCESS_CODE / TECH_ACCESS_CODE)')
        sys.exit(2)
    if admin_code == tech_code:
        print('[ERROR] admin and technician codes must differ')
        sys.exit(2)

    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM access_codes LIMIT 1'))
        except Exception:
            # Auto-create schema for bootstrap; in real env prefer alembic upgrade
            session.rollback()
            from repairdesk.models.user import Base
            import repairdesk.models.work_order  # noqa: F401
            Base.metadata.create_all(session.get_bind())

    with app.app_context():
        session = get_db()
        changed = ensure_codes(session, admin_code, tech_code)
        if not args.no_admin:
            ensure_initial_admin(session)
        if args.dry_run:
            session.rollback()
            print(f"[DRY-RUN] (rolled back) Access codes would change: {changed}")
        else:
            session.commit()
            print(f"[DONE] Access codes changed: {changed}")
        if args.show:
            cfg = session.get(AccessConfig, ACCESS_CONFIG_ID)
            if cfg:
                print(f"admin_code={cfg.admin_code} tech_code={cfg.tech_code}")


if __name__ == '__main__':
    main()
