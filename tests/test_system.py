# tests/test_system.py
"""
Tests for the MLMSystem facade: persistence around each call and
serialization of concurrent purchases.
"""
import threading
import time
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from core.db import build_engine
from core.document_store import DocumentStore
from mlm_system.errors import CorruptStateError
from mlm_system.system import MLMSystem
from models import StoredDocument


class TestFacade:

    def test_auto_initialize_on_empty_store(self, empty_store):
        system = MLMSystem(empty_store)

        assert [p.id for p in system.list_products()] == ["p1", "p2", "sub1"]
        assert system.get_product("p2").price == Decimal("500")
        assert system.get_product("nope") is None

    def test_corrupt_store_surfaces_error(self, empty_store, session_factory):
        session = session_factory()
        session.add(StoredDocument(storeKey="test_db", payload="garbage", revision=1))
        session.commit()
        session.close()

        with pytest.raises(CorruptStateError):
            MLMSystem(empty_store)

        system = MLMSystem(empty_store, auto_initialize=False)
        system.initialize(recover_corrupt=True)
        assert len(system.list_users()) == 1

    def test_fresh_database_without_setup(self):
        fresh = build_engine("sqlite://")
        system = MLMSystem(DocumentStore(session_factory=sessionmaker(bind=fresh), store_key="fresh"))

        member = system.register("alice", "secret", "Alice", "root")

        assert system.get_user(member.id).sponsorId == "root"
        fresh.dispose()

    def test_changes_visible_to_second_facade(self, store, chain):
        other = MLMSystem(store)

        assert len(other.list_users()) == 6

    def test_returned_objects_are_detached(self, system, chain):
        user = system.get_user(chain['A'].id)
        user.balance = Decimal("999")

        assert system.get_user(chain['A'].id).balance == Decimal("0")

    def test_count_downline_and_orphans(self, system, chain):
        assert system.count_downline('root') == 5
        assert system.count_downline(chain['D'].id) == 1
        assert system.find_orphan_branches() == set()

    def test_reset_to_defaults(self, system, chain):
        system.purchase(chain['E'].id, 'p1')

        system.reset_to_defaults()

        assert len(system.list_users()) == 1
        assert system.list_transactions() == []


class TestConcurrentPurchases:

    def test_no_lost_updates(self, system, chain):
        """
        TEST: Parallel purchases against one chain all land in the balances.
        """
        buyer = chain['E'].id
        errors = []

        def buy():
            try:
                for _ in range(5):
                    system.purchase(buyer, 'p2')
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=buy) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(system.list_transactions()) == 20
        # D receives 10% of 500 on each of 20 purchases
        assert system.get_user(chain['D'].id).balance == Decimal("1000")
        assert system.get_user('root').balance == Decimal("100")

    def test_separate_stores_on_one_document(self, session_factory, monkeypatch):
        """
        TEST: Two facades, each with its own store object on the same key,
        still serialize their purchases.
        """
        first = MLMSystem(DocumentStore(session_factory=session_factory, store_key="shared"))
        second = MLMSystem(DocumentStore(session_factory=session_factory, store_key="shared"))
        member = first.register("member", "pass", "Member", "root")

        # widen the load -> save window
        original_load = DocumentStore.load

        def slow_load(self):
            document = original_load(self)
            time.sleep(0.02)
            return document

        monkeypatch.setattr(DocumentStore, "load", slow_load)

        errors = []

        def buy(system):
            try:
                for _ in range(5):
                    system.purchase(member.id, 'p2')
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=buy, args=(s,)) for s in (first, second)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(first.list_transactions()) == 10
        # root receives 10% of 500 on each of 10 purchases
        assert second.get_user('root').balance == Decimal("500")
