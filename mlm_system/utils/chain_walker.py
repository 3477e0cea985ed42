# mlm_system/utils/chain_walker.py
"""
Safe MLM chain walking utilities.
Prevents infinite loops and validates chain integrity.
"""
from typing import Callable, Dict, Iterable, List, Optional, Set
import logging

from models.user import User

logger = logging.getLogger(__name__)


class ChainWalker:
    """
    Safe utilities for walking MLM upline/downline chains.

    Works on an id-indexed view of the users, so every step up the chain is
    a dictionary lookup and revisits are detected with a visited-id set.
    """

    def __init__(self, users: Iterable[User]):
        self.users: List[User] = list(users)
        self.by_id: Dict[str, User] = {u.id: u for u in self.users}

    def find_root(self) -> Optional[User]:
        """First user without a sponsor."""
        for user in self.users:
            if user.isRoot:
                return user
        return None

    def walk_upline(
            self,
            start_user: User,
            callback: Callable[[User, int], bool],
            max_depth: int = 50
    ) -> int:
        """
        Safely walk up the upline chain, calling callback for each user.

        Stops at max_depth users, a missing sponsor id, an unknown sponsor
        (broken chain) or a revisited user (cycle).

        Args:
            start_user: Starting user (not passed to callback)
            callback: Function(user, level) -> continue_walking (bool)
            max_depth: Maximum number of upline users to visit

        Returns:
            Number of users processed

        Example:
            def process_upline(user, level):
                print(f"Level {level}: {user.id}")
                return True  # Continue walking

            walker.walk_upline(user, process_upline)
        """
        current_user = start_user
        level = 1
        processed = 0
        visited = {start_user.id}

        while current_user.sponsorId is not None and level <= max_depth:
            sponsor_id = current_user.sponsorId

            # Check for cycles
            if sponsor_id in visited:
                logger.error(
                    f"Cycle detected at user {sponsor_id} "
                    f"walking upline from {start_user.id}"
                )
                break

            upline_user = self.by_id.get(sponsor_id)
            if upline_user is None:
                logger.warning(
                    f"Upline not found: sponsorId={sponsor_id} "
                    f"for user {current_user.id}"
                )
                break

            visited.add(sponsor_id)

            should_continue = callback(upline_user, level)
            processed += 1

            if not should_continue:
                break

            current_user = upline_user
            level += 1

        return processed

    def walk_downline(
            self,
            start_user: User,
            callback: Callable[[User, int], None],
            max_depth: int = 50,
            visited: Optional[Set[str]] = None,
            _level: int = 1
    ) -> int:
        """
        Safely walk down the downline tree recursively (depth-first,
        insertion order).

        Args:
            start_user: Starting user (not passed to callback)
            callback: Function(user, level) to call for each user
            max_depth: Maximum depth
            visited: Set of visited user IDs (for cycle detection)

        Returns:
            Total number of users processed
        """
        if visited is None:
            visited = set()

        if max_depth <= 0:
            return 0

        # Check for cycles
        if start_user.id in visited:
            logger.error(f"Cycle detected in downline at user {start_user.id}")
            return 0

        visited.add(start_user.id)

        processed = 0

        for referral in self.direct_referrals(start_user.id):
            if referral.id in visited:
                logger.error(f"Cycle detected in downline at user {referral.id}")
                continue

            callback(referral, _level)
            processed += 1

            processed += self.walk_downline(
                referral,
                callback,
                max_depth - 1,
                visited,
                _level + 1
            )

        return processed

    def direct_referrals(self, user_id: str) -> List[User]:
        """Users whose sponsor is user_id, in insertion order."""
        return [u for u in self.users if u.sponsorId == user_id and u.id != user_id]

    def get_upline_chain(self, user: User, max_depth: int = 50) -> List[User]:
        """
        Get list of users in upline chain.

        Args:
            user: Starting user
            max_depth: Maximum depth

        Returns:
            List of users from immediate sponsor upward
        """
        chain = []

        def collect(upline_user, level):
            chain.append(upline_user)
            return True  # Continue

        self.walk_upline(user, collect, max_depth)
        return chain

    def count_downline(self, user: User, max_depth: int = 50) -> int:
        """Count total number of users in downline."""
        count = [0]  # Use list to allow modification in callback

        def counter(downline_user, level):
            count[0] += 1

        self.walk_downline(user, counter, max_depth)
        return count[0]

    def validate_chain_to_root(self, user_id: str, max_depth: Optional[int] = None) -> bool:
        """
        Validate that user's upline chain reaches a root user.

        Args:
            user_id: User ID to validate
            max_depth: Safety limit, defaults to the number of users

        Returns:
            True if chain is valid, False otherwise
        """
        user = self.by_id.get(user_id)
        if not user:
            logger.error(f"User {user_id} not found")
            return False

        if max_depth is None:
            max_depth = len(self.users)

        visited = set()
        current_user = user
        depth = 0

        while depth < max_depth:
            if current_user.isRoot:
                logger.debug(f"User {user_id} chain is valid (depth={depth})")
                return True

            if current_user.id in visited:
                logger.error(f"Cycle detected in chain for user {user_id}")
                return False

            visited.add(current_user.id)

            upline_user = self.by_id.get(current_user.sponsorId)
            if not upline_user:
                logger.error(
                    f"Broken chain: sponsorId={current_user.sponsorId} "
                    f"not found for user {current_user.id}"
                )
                return False

            current_user = upline_user
            depth += 1

        logger.error(f"Chain too deep (>{max_depth}) for user {user_id}")
        return False

    def find_orphan_branches(self) -> Set[str]:
        """
        Find all users whose chains don't reach a root.

        Returns:
            Set of user IDs in orphan branches
        """
        orphans = set()

        for user in self.users:
            if user.isRoot:
                continue
            if not self.validate_chain_to_root(user.id):
                orphans.add(user.id)

        if orphans:
            logger.warning(f"Found {len(orphans)} users in orphan branches: {orphans}")
        else:
            logger.info("No orphan branches found")

        return orphans
