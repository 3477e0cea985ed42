#!/usr/bin/env python3
"""
Display MLM structure tree.

Shows the complete sponsor hierarchy with balances, followed by ledger
statistics.

Usage:
    python scripts/show_tree.py [--root-id USER_ID] [--max-depth DEPTH] [--stats]
"""

import sys
import os
import argparse
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config
from core.db import setup_database
from core.document_store import DocumentStore
from mlm_system.errors import StorageError
from mlm_system.utils.chain_walker import ChainWalker

import logging

logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)


def print_tree(document, root_user, max_depth=None):
    """Print ASCII tree of the structure."""
    walker = ChainWalker(document.users)
    visited = set()

    def print_user(user, prefix="", is_last=True, depth=0):
        if max_depth and depth > max_depth:
            return
        if user.id in visited:
            print(f"{prefix}└─ ⚠️ cycle at {user.id}")
            return
        visited.add(user.id)

        connector = "└─ " if is_last else "├─ "
        root_marker = "👑 " if user.isRoot else ""
        balance_display = f"{user.balance}" if user.balance > 0 else ""

        print(
            f"{prefix}{connector}{root_marker}"
            f"{user.name} (ID:{user.id}, @{user.username}) {balance_display}"
        )

        children = walker.direct_referrals(user.id)
        for i, child in enumerate(children):
            is_last_child = (i == len(children) - 1)
            new_prefix = prefix + ("    " if is_last else "│   ")
            print_user(child, new_prefix, is_last_child, depth + 1)

    print("\n" + "=" * 80)
    print("MLM STRUCTURE TREE")
    print("=" * 80)
    print("\nLegend:")
    print("  👑 = Root user")
    print("  amount = Withdrawable balance (if any)")
    print("\n" + "=" * 80 + "\n")
    print_user(root_user)
    print("\n" + "=" * 80 + "\n")


def print_statistics(document):
    """Print ledger statistics."""
    total_users = len(document.users)
    walker = ChainWalker(document.users)
    orphans = walker.find_orphan_branches()

    total_sales = sum((t.amount for t in document.transactions), Decimal("0"))
    total_paid = sum((t.totalCommission for t in document.transactions), Decimal("0"))

    print("\n" + "=" * 80)
    print("LEDGER STATISTICS")
    print("=" * 80 + "\n")

    print(f"Total users:    {total_users}")
    print(f"Orphan users:   {len(orphans)}")
    print(f"Transactions:   {len(document.transactions)}")
    print(f"Sales volume:   {total_sales}")
    print(f"Commissions:    {total_paid}")
    print(f"Rates (%):      {', '.join(str(r) for r in document.settings.rates)}")

    print("\nTop earners:")
    earners = sorted(document.users, key=lambda u: u.totalEarnings, reverse=True)[:5]
    for user in earners:
        if user.totalEarnings > 0:
            print(f"  {user.name:24} {user.totalEarnings}")

    print("\n" + "=" * 80 + "\n")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Display MLM structure tree')
    parser.add_argument('--root-id',
                        help='ID of the user to start from (default: root user)')
    parser.add_argument('--max-depth', type=int,
                        help='Maximum depth to display')
    parser.add_argument('--stats', action='store_true',
                        help='Show statistics only')
    args = parser.parse_args()

    # Initialize config
    Config.initialize_from_env()
    setup_database()

    try:
        document = DocumentStore().load()
    except StorageError as e:
        print(f"❌ Cannot read ledger: {e}")
        sys.exit(1)

    if args.stats:
        print_statistics(document)
        return

    walker = ChainWalker(document.users)
    if args.root_id:
        root = walker.by_id.get(args.root_id)
        if not root:
            print(f"❌ User with ID {args.root_id} not found!")
            return
    else:
        root = walker.find_root()
        if not root:
            print("❌ No root user found!")
            return

    print_tree(document, root, args.max_depth)
    print_statistics(document)


if __name__ == "__main__":
    main()
