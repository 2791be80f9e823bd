#!/usr/bin/env python
"""Re-derive every chamber's status from its usage logs.

Usage:
    python backend/scripts/reconcile_assets.py            # apply corrections
    python backend/scripts/reconcile_assets.py --dry-run  # print corrections, change nothing
    python backend/scripts/reconcile_assets.py --now 2025-10-01T08:00:00

Safe to run repeatedly: a second run with no data change reports nothing.
"""
from __future__ import annotations
import os, sys, argparse, json

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from sqlalchemy import select
from labtrack import create_app, get_db
from labtrack.models.asset import Asset
from labtrack.models.usage_log import UsageLog
from labtrack.services.reconcile import reconcile_asset_status, reconcile_all
from labtrack.utils.timestamps import parse_instant


def main(argv=None):
    parser = argparse.ArgumentParser(description='Reconcile asset status with usage logs')
    parser.add_argument('--dry-run', action='store_true', help='compute corrections without writing them')
    parser.add_argument('--now', help='evaluate as of this local ISO instant instead of the clock')
    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        now = app.config['CLOCK']()
        if args.now:
            now = parse_instant(args.now)
            if now is None:
                parser.error('--now is not a valid timestamp')
        session = get_db()
        if args.dry_run:
            assets = session.execute(select(Asset)).scalars().all()
            logs = session.execute(select(UsageLog)).scalars().all()
            writes = reconcile_asset_status(assets, logs, now)
        else:
            writes = reconcile_all(session, now)
        print(json.dumps({'dry_run': args.dry_run, 'changed': len(writes), 'writes': [w.as_dict() for w in writes]}, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
