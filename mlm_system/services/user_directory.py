# mlm_system/services/user_directory.py
"""
User directory - registration, authentication and sponsor-tree queries.
"""
import logging
from typing import List, Optional

from config import Config
from core.utils import generate_user_id
from mlm_system.errors import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    UnknownUserError,
    UnresolvedSponsorError,
)
from mlm_system.utils.chain_walker import ChainWalker
from mlm_system.utils.time_machine import timeMachine
from models.document import Document
from models.user import Role, User

logger = logging.getLogger(__name__)


class UserDirectory:
    """
    Service for user records and the sponsor relation.

    Responsibilities:
    - User registration (with sponsor policy)
    - Credential check
    - Direct reports and upline resolution
    """

    def __init__(self, document: Document, sponsor_policy: Optional[str] = None):
        """
        Initialize user directory.

        Args:
            document: Loaded ledger document, mutated in place
            sponsor_policy: 'strict' or 'lenient'; defaults to Config.SPONSOR_POLICY
        """
        self.document = document
        self.sponsor_policy = Config.parse_sponsor_policy(
            sponsor_policy or Config.get(Config.SPONSOR_POLICY)
        )

    # ═══════════════════════════════════════════════════════════════════════
    # LOOKUPS
    # ═══════════════════════════════════════════════════════════════════════

    def get(self, user_id: Optional[str]) -> Optional[User]:
        if user_id is None:
            return None
        for user in self.document.users:
            if user.id == user_id:
                return user
        return None

    def require(self, user_id: Optional[str]) -> User:
        user = self.get(user_id)
        if user is None:
            raise UnknownUserError(user_id)
        return user

    def get_by_username(self, username: str) -> Optional[User]:
        for user in self.document.users:
            if user.username == username:
                return user
        return None

    def list_users(self) -> List[User]:
        """Full genealogy as a flat list, insertion order."""
        return list(self.document.users)

    def root(self) -> Optional[User]:
        return ChainWalker(self.document.users).find_root()

    # ═══════════════════════════════════════════════════════════════════════
    # REGISTRATION / AUTHENTICATION
    # ═══════════════════════════════════════════════════════════════════════

    def register(
            self,
            username: str,
            password: str,
            name: str,
            sponsor_id: Optional[str]
    ) -> User:
        """
        Register a new member under a sponsor.

        Args:
            username: Unique login name (case-sensitive)
            password: Opaque credential
            name: Display name
            sponsor_id: ID of the sponsoring user

        Returns:
            The created User

        Raises:
            DuplicateUsernameError: If username is taken
            UnresolvedSponsorError: If sponsor not found and policy is strict
        """
        if self.get_by_username(username) is not None:
            logger.info(f"Registration rejected, username '{username}' already taken")
            raise DuplicateUsernameError(username)

        sponsor = self.get(sponsor_id)
        if sponsor is None:
            sponsor = self._resolve_missing_sponsor(sponsor_id)

        user = User(
            id=self._allocate_id(),
            username=username,
            password=password,
            name=name,
            sponsorId=sponsor.id,
            role=Role.MEMBER,
            joinedAt=timeMachine.now,
        )
        self.document.users.append(user)

        logger.info(f"New user registered: id={user.id}, username={username}, sponsor={sponsor.id}")
        return user

    def _resolve_missing_sponsor(self, sponsor_id: Optional[str]) -> User:
        """Apply the sponsor policy to an unresolvable sponsor id."""
        if self.sponsor_policy == Config.SPONSOR_POLICY_STRICT:
            logger.info(f"Registration rejected, sponsor {sponsor_id} not found (strict policy)")
            raise UnresolvedSponsorError(sponsor_id)

        root = self.root()
        if root is None:
            logger.error("Lenient sponsor policy but no root user in directory")
            raise UnresolvedSponsorError(sponsor_id)

        logger.warning(f"Sponsor {sponsor_id} not found, defaulting to root {root.id}")
        return root

    def _allocate_id(self) -> str:
        existing = {u.id for u in self.document.users}
        user_id = generate_user_id()
        while user_id in existing:
            user_id = generate_user_id()
        return user_id

    def authenticate(self, username: str, password: str) -> User:
        """
        Check a username/password pair.

        Raises:
            InvalidCredentialsError: On any mismatch
        """
        user = self.get_by_username(username)
        if user is None or user.password != password:
            logger.debug("Authentication failed")
            raise InvalidCredentialsError()
        return user

    # ═══════════════════════════════════════════════════════════════════════
    # TREE QUERIES
    # ═══════════════════════════════════════════════════════════════════════

    def get_direct_reports(self, user_id: str) -> List[User]:
        """Users sponsored directly by user_id, insertion order."""
        return ChainWalker(self.document.users).direct_referrals(user_id)

    def resolve_upline(self, user_id: str, max_levels: int) -> List[User]:
        """
        Sponsors above a user, nearest first, at most max_levels long.

        Stops early at the root, at a sponsor id that does not resolve and
        at a revisited user.

        Raises:
            UnknownUserError: If user_id is not in the directory
        """
        user = self.require(user_id)
        if max_levels <= 0:
            return []
        return ChainWalker(self.document.users).get_upline_chain(user, max_levels)
