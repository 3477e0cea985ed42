# tests/test_chain_walker.py
"""
Tests for ChainWalker: upline/downline walks, cycle guards and
chain-to-root validation.

Run:
    pytest tests/test_chain_walker.py -v
"""
from mlm_system.config.defaults import default_root_user
from mlm_system.utils.chain_walker import ChainWalker
from models import User


def _user(user_id, sponsor_id):
    return User(id=user_id, username=user_id, password="x", name=user_id.upper(), sponsorId=sponsor_id)


def _tree():
    """
    root
    ├─ a
    │  ├─ c
    │  │  └─ e
    │  └─ d
    └─ b
    """
    return [
        default_root_user(),
        _user("a", "root"),
        _user("b", "root"),
        _user("c", "a"),
        _user("d", "a"),
        _user("e", "c"),
    ]


class TestWalkUpline:

    def test_callback_receives_levels(self):
        walker = ChainWalker(_tree())
        seen = []

        processed = walker.walk_upline(walker.by_id["e"], lambda u, level: seen.append((u.id, level)) or True)

        assert processed == 3
        assert seen == [("c", 1), ("a", 2), ("root", 3)]

    def test_callback_can_stop(self):
        walker = ChainWalker(_tree())

        processed = walker.walk_upline(walker.by_id["e"], lambda u, level: False)

        assert processed == 1

    def test_max_depth(self):
        walker = ChainWalker(_tree())

        assert [u.id for u in walker.get_upline_chain(walker.by_id["e"], max_depth=2)] == ["c", "a"]

    def test_long_cycle_visits_each_user_once(self):
        users = [_user(f"n{i}", f"n{(i + 1) % 50}") for i in range(50)]
        walker = ChainWalker(users)

        chain = walker.get_upline_chain(walker.by_id["n0"], max_depth=1000)

        assert len(chain) == 49
        assert len({u.id for u in chain}) == 49


class TestWalkDownline:

    def test_depth_first_insertion_order(self):
        walker = ChainWalker(_tree())
        seen = []

        walker.walk_downline(walker.by_id["root"], lambda u, level: seen.append((u.id, level)))

        assert seen == [("a", 1), ("c", 2), ("e", 3), ("d", 2), ("b", 1)]

    def test_count_downline(self):
        walker = ChainWalker(_tree())

        assert walker.count_downline(walker.by_id["root"]) == 5
        assert walker.count_downline(walker.by_id["a"]) == 3
        assert walker.count_downline(walker.by_id["e"]) == 0

    def test_count_respects_depth(self):
        walker = ChainWalker(_tree())

        assert walker.count_downline(walker.by_id["root"], max_depth=1) == 2

    def test_downline_cycle_terminates(self):
        users = [_user("x", "y"), _user("y", "x")]
        walker = ChainWalker(users)

        assert walker.count_downline(walker.by_id["x"]) == 1


class TestChainValidation:

    def test_valid_tree(self):
        walker = ChainWalker(_tree())

        assert walker.validate_chain_to_root("e")
        assert walker.find_orphan_branches() == set()

    def test_orphans_detected(self):
        users = _tree() + [
            _user("lost", "ghost"),
            _user("under_lost", "lost"),
            _user("loop1", "loop2"),
            _user("loop2", "loop1"),
        ]
        walker = ChainWalker(users)

        assert walker.find_orphan_branches() == {"lost", "under_lost", "loop1", "loop2"}

    def test_unknown_user_is_invalid(self):
        assert not ChainWalker(_tree()).validate_chain_to_root("nobody")

    def test_find_root(self):
        assert ChainWalker(_tree()).find_root().id == "root"
        assert ChainWalker([_user("a", "b")]).find_root() is None
