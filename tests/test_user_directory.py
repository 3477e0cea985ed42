# tests/test_user_directory.py
"""
Tests for UserDirectory: registration, sponsor policy, authentication,
direct reports and upline resolution.

Run:
    pytest tests/test_user_directory.py -v
"""
from decimal import Decimal

import pytest

from config import Config
from mlm_system.errors import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    UnknownUserError,
    UnresolvedSponsorError,
)
from mlm_system.services.user_directory import UserDirectory
from mlm_system.system import MLMSystem
from models import Role, User
from mlm_system.utils.time_machine import timeMachine


# =============================================================================
# TEST CLASS: Registration
# =============================================================================

class TestRegister:

    def test_new_member_defaults(self, system):
        user = system.register("alice", "secret", "Alice", "root")

        assert user.id.startswith("u_")
        assert user.sponsorId == "root"
        assert user.balance == Decimal("0")
        assert user.totalEarnings == Decimal("0")
        assert user.role == Role.MEMBER
        assert user.joinedAt == timeMachine.now

    def test_registered_user_is_persisted(self, system):
        user = system.register("alice", "secret", "Alice", "root")

        assert system.get_user(user.id) == user
        assert [u.username for u in system.list_users()] == ["admin", "alice"]

    def test_ids_are_unique(self, system):
        ids = {system.register(f"user{i}", "p", f"User {i}", "root").id for i in range(20)}
        assert len(ids) == 20

    def test_duplicate_username_rejected(self, system):
        """
        TEST: Second registration of a username fails, directory unchanged.
        """
        system.register("alice", "secret", "Alice", "root")
        before = system.list_users()

        with pytest.raises(DuplicateUsernameError):
            system.register("alice", "other", "Other Alice", "root")

        assert system.list_users() == before

    def test_username_match_is_case_sensitive(self, system):
        system.register("alice", "secret", "Alice", "root")

        user = system.register("Alice", "secret", "Big Alice", "root")

        assert user.username == "Alice"

    def test_root_username_is_taken(self, system):
        with pytest.raises(DuplicateUsernameError):
            system.register("admin", "x", "Fake Admin", "root")


# =============================================================================
# TEST CLASS: Sponsor policy
# =============================================================================

class TestSponsorPolicy:

    def test_strict_rejects_unknown_sponsor(self, system):
        before = system.list_users()

        with pytest.raises(UnresolvedSponsorError) as exc_info:
            system.register("bob", "pw", "Bob", "u_ghost")

        assert exc_info.value.sponsor_id == "u_ghost"
        assert system.list_users() == before

    def test_strict_rejects_missing_sponsor(self, system):
        with pytest.raises(UnresolvedSponsorError):
            system.register("bob", "pw", "Bob", None)

    def test_lenient_substitutes_root(self, store):
        system = MLMSystem(store, sponsor_policy="lenient")

        user = system.register("bob", "pw", "Bob", "u_ghost")

        assert user.sponsorId == "root"

    def test_policy_from_config(self, document):
        Config.set(Config.SPONSOR_POLICY, Config.SPONSOR_POLICY_LENIENT)

        user = UserDirectory(document).register("bob", "pw", "Bob", None)

        assert user.sponsorId == "root"

    def test_lenient_without_root_still_fails(self):
        from models import Document
        document = Document(users=[
            User(id="a", username="a", password="a", name="A", sponsorId="b"),
        ])

        with pytest.raises(UnresolvedSponsorError):
            UserDirectory(document, sponsor_policy="lenient").register("c", "c", "C", "ghost")


# =============================================================================
# TEST CLASS: Authentication
# =============================================================================

class TestAuthenticate:

    def test_valid_credentials(self, system):
        created = system.register("alice", "secret", "Alice", "root")

        assert system.authenticate("alice", "secret").id == created.id

    def test_default_admin_can_log_in(self, system):
        admin = system.authenticate("admin", "admin")

        assert admin.id == "root"
        assert admin.isAdmin

    @pytest.mark.parametrize("username,password", [
        ("alice", "wrong"),
        ("nobody", "secret"),
        ("ALICE", "secret"),
        ("alice", "Secret"),
    ])
    def test_mismatch_gives_same_error(self, system, username, password):
        system.register("alice", "secret", "Alice", "root")

        with pytest.raises(InvalidCredentialsError) as exc_info:
            system.authenticate(username, password)

        assert str(exc_info.value) == "Invalid username or password"


# =============================================================================
# TEST CLASS: Direct reports
# =============================================================================

class TestDirectReports:

    def test_insertion_order(self, system):
        first = system.register("first", "p", "First", "root")
        system.register("nested", "p", "Nested", first.id)
        second = system.register("second", "p", "Second", "root")

        reports = system.get_direct_reports("root")

        assert [u.id for u in reports] == [first.id, second.id]

    def test_leaf_has_no_reports(self, system, chain):
        assert system.get_direct_reports(chain['E'].id) == []

    def test_unknown_user_has_no_reports(self, system):
        assert system.get_direct_reports("u_ghost") == []

    def test_repeatable(self, system, chain):
        assert system.get_direct_reports(chain['A'].id) == system.get_direct_reports(chain['A'].id)


# =============================================================================
# TEST CLASS: Upline resolution
# =============================================================================

class TestResolveUpline:

    def test_full_chain_nearest_first(self, system, chain):
        upline = system.resolve_upline(chain['E'].id, 5)

        assert [u.id for u in upline] == [
            chain['D'].id, chain['C'].id, chain['B'].id, chain['A'].id, 'root'
        ]

    def test_capped_at_max_levels(self, system, chain):
        upline = system.resolve_upline(chain['E'].id, 2)

        assert [u.id for u in upline] == [chain['D'].id, chain['C'].id]

    def test_defaults_to_rate_table_length(self, system, chain):
        system.set_rates([10, 5])

        assert len(system.resolve_upline(chain['E'].id)) == 2

    def test_zero_levels(self, system, chain):
        assert system.resolve_upline(chain['E'].id, 0) == []

    def test_root_has_empty_upline(self, system):
        assert system.resolve_upline("root", 5) == []

    def test_unknown_user(self, system):
        with pytest.raises(UnknownUserError):
            system.resolve_upline("u_ghost", 5)

    def test_stops_at_broken_chain(self, document):
        document.users.append(User(id="a", username="a", password="a", name="A", sponsorId="missing"))
        document.users.append(User(id="b", username="b", password="b", name="B", sponsorId="a"))

        upline = UserDirectory(document).resolve_upline("b", 5)

        assert [u.id for u in upline] == ["a"]

    def test_terminates_on_cycle(self, document):
        """
        TEST: a -> b -> c -> a loop; walk ends before revisiting anyone.
        """
        document.users.append(User(id="a", username="a", password="a", name="A", sponsorId="b"))
        document.users.append(User(id="b", username="b", password="b", name="B", sponsorId="c"))
        document.users.append(User(id="c", username="c", password="c", name="C", sponsorId="a"))

        upline = UserDirectory(document).resolve_upline("a", 50)

        assert [u.id for u in upline] == ["b", "c"]

    def test_self_sponsor_terminates(self, document):
        document.users.append(User(id="s", username="s", password="s", name="S", sponsorId="s"))

        assert UserDirectory(document).resolve_upline("s", 5) == []

    @pytest.mark.parametrize("max_levels", [1, 3, 5, 10])
    def test_never_exceeds_max_levels(self, system, chain, max_levels):
        upline = system.resolve_upline(chain['E'].id, max_levels)

        assert len(upline) == min(max_levels, 5)
