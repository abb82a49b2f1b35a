#!/usr/bin/env python3
"""
Consistency report for group memberships.

This script:
1. Counts active members of every group and flags groups above the maximum
2. Finds active members sharing a display name (ignoring case)
3. Optionally purges expired share links

A group above the maximum means some write bypassed the capacity check,
so every hit is also logged as GROUP_TOO_LARGE.

Usage:
    python -m backend.check_group_sizes [--max-members N] [--purge-expired-links]
"""

import sys
import logging
import argparse
from collections import defaultdict
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from backend.app.core.config import settings
from backend.app.core.database import get_engine
from backend.app.models.group import Group
from backend.app.models.membership import GroupMembership, MembershipStatus
from backend.app.services.share_links import ShareLinkService
from membership_core import detect_overflow, find_display_name_conflict
from membership_core.errors import GroupTooLargeError

logger = logging.getLogger("check_group_sizes")


def check_group_sizes(
    engine: Engine,
    max_members: Optional[int] = None,
    purge_expired_links: bool = False,
) -> dict:
    """
    Scan all groups for membership invariant violations.

    Args:
        engine: Database engine to scan
        max_members: Capacity to check against (defaults to MAX_GROUP_MEMBERS)
        purge_expired_links: If True, delete expired share links per group

    Returns:
        Statistics dictionary
    """
    max_members = max_members or settings.MAX_GROUP_MEMBERS
    stats = {
        "total_groups": 0,
        "oversized_groups": [],
        "name_conflicts": [],
        "purged_links": 0,
    }

    with Session(engine) as session:
        groups = session.exec(select(Group)).all()
        stats["total_groups"] = len(groups)

        active_by_group = defaultdict(list)
        for membership in session.exec(
            select(GroupMembership).where(GroupMembership.status == MembershipStatus.ACTIVE)
        ):
            active_by_group[membership.group_id].append(membership)

        for group in groups:
            active = active_by_group.get(group.id, [])

            try:
                detect_overflow(len(active), max_members, group_id=group.id)
            except GroupTooLargeError as e:
                stats["oversized_groups"].append(
                    {
                        "group_id": str(group.id),
                        "name": group.name,
                        "active_count": e.stored_count,
                    }
                )

            seen = []
            for membership in active:
                conflict = find_display_name_conflict(seen, membership.display_name)
                if conflict is not None:
                    stats["name_conflicts"].append(
                        {
                            "group_id": str(group.id),
                            "name": group.name,
                            "display_names": [conflict, membership.display_name],
                        }
                    )
                seen.append(membership.display_name)

    if purge_expired_links:
        share_links = ShareLinkService(engine)
        for group in groups:
            stats["purged_links"] += share_links.remove_expired_links(group.id)

    return stats


def print_summary(stats: dict, max_members: int):
    """Print the report."""
    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"Total groups:        {stats['total_groups']:6d}")
    print(f"Maximum members:     {max_members:6d}")
    print(f"Oversized groups:    {len(stats['oversized_groups']):6d}")
    print(f"Name conflicts:      {len(stats['name_conflicts']):6d}")
    print(f"Purged links:        {stats['purged_links']:6d}")

    for group in stats["oversized_groups"]:
        print(f"  TOO LARGE  {group['name'][:40]:40} {group['active_count']:4d} active")

    for conflict in stats["name_conflicts"]:
        names = " / ".join(conflict["display_names"])
        print(f"  NAME CLASH {conflict['name'][:40]:40} {names}")


def main():
    parser = argparse.ArgumentParser(description="Report groups that break membership limits")
    parser.add_argument("--max-members", type=int, default=None,
                        help="Capacity to check against (default: MAX_GROUP_MEMBERS)")
    parser.add_argument("--purge-expired-links", action="store_true",
                        help="Delete expired share links while scanning")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
    )

    max_members = args.max_members or settings.MAX_GROUP_MEMBERS

    try:
        stats = check_group_sizes(
            get_engine(),
            max_members=max_members,
            purge_expired_links=args.purge_expired_links,
        )
        print_summary(stats, max_members)
    except Exception as e:
        print(f"Error during check: {e}")
        sys.exit(1)

    if stats["oversized_groups"] or stats["name_conflicts"]:
        sys.exit(2)


if __name__ == "__main__":
    main()
