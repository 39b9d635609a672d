"""One-off rewrite of legacy status spellings."""

from tools.migrate_legacy_statuses import migrate


class TestMigrateLegacyStatuses:
    def _seed(self, fake_db):
        fake_db.tables["orders"] = [
            {"id": "a", "order_id": 501, "phone": "1", "status": "Return"},
            {"id": "b", "order_id": 502, "phone": "2", "status": "Cancel"},
            {"id": "c", "order_id": 503, "phone": "3", "status": "Processing"},
        ]

    def test_rewrites_legacy_spellings(self, fake_db):
        self._seed(fake_db)
        assert migrate() == {"Return": 1, "Cancel": 1}
        statuses = {row["id"]: row["status"] for row in fake_db.rows("orders")}
        assert statuses == {"a": "Returned", "b": "Cancelled", "c": "Processing"}

    def test_dry_run_changes_nothing(self, fake_db):
        self._seed(fake_db)
        assert migrate(dry_run=True) == {"Return": 1, "Cancel": 1}
        assert [row["status"] for row in fake_db.rows("orders")] == ["Return", "Cancel", "Processing"]

    def test_migrated_orders_stop_blocking_new_orders(self, place_order, fake_db):
        fake_db.tables["orders"] = [
            {"id": "a", "order_id": 501, "phone": "01711000000", "status": "Cancel"}
        ]
        assert place_order().status_code == 409
        migrate()
        assert place_order().status_code == 201
