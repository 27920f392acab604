"""Tests for alert detection, ranking and filtering."""

import pytest

from clinic_inventory import alerts
from clinic_inventory.config import EngineConfig
from clinic_inventory.schemas import AlertKind, Priority

from conftest import TODAY, make_record


def kinds(result):
    return [a.kind.value for a in result]


class TestGenerateAlerts:
    def test_out_of_stock_and_expired_without_critical_low(self, config):
        record = make_record(name="Insulin Pens", quantity=0, low_stock_threshold=10, expiry_days=-1)
        result = alerts.generate_alerts([record], config, TODAY)

        assert kinds(result) == ["out-of-stock", "expired"]
        assert all(a.priority == Priority.HIGH for a in result)

    def test_ranking_with_insertion_tie_break(self, config):
        expiring = make_record(id=1, name="Vitamin C", quantity=100, expiry_days=3)
        expired = make_record(id=2, name="Cough Syrup", quantity=100, expiry_days=-2)
        empty = make_record(id=3, name="Gloves", quantity=0, expiry_days=400)

        result = alerts.generate_alerts([expiring, expired, empty], config, TODAY)

        assert kinds(result) == ["out-of-stock", "expired", "expiring-soon"]
        assert [a.record_id for a in result] == [3, 2, 1]

    def test_full_ordering_for_mixed_inventory(self, config, clinic_records):
        result = alerts.generate_alerts(clinic_records, config, TODAY)

        assert [(a.kind.value, a.record_id) for a in result] == [
            ("out-of-stock", 3),
            ("critical-low", 2),
            ("critical-low", 6),
            ("expired", 4),
            ("expiring-soon", 5),
        ]

    def test_messages_and_action_labels(self, config):
        records = [
            make_record(id=1, name="Gloves", quantity=0),
            make_record(id=2, name="Masks", quantity=2, low_stock_threshold=10),
            make_record(id=3, name="Syrup", expiry_days=-9),
            make_record(id=4, name="Tablets", expiry_days=1),
            make_record(id=5, name="Drops", expiry_days=6),
        ]
        result = {(a.kind, a.record_id): a for a in alerts.generate_alerts(records, config, TODAY)}

        assert result[(AlertKind.OUT_OF_STOCK, 1)].message == "Gloves is out of stock"
        assert result[(AlertKind.OUT_OF_STOCK, 1)].action_label == "Restock Now"
        assert result[(AlertKind.CRITICAL_LOW, 2)].message == "Masks has critically low stock (2 remaining)"
        assert result[(AlertKind.CRITICAL_LOW, 2)].action_label == "Update Stock"
        assert result[(AlertKind.EXPIRED, 3)].message == "Syrup has expired on Aug 1, 2025"
        assert result[(AlertKind.EXPIRED, 3)].action_label == "Remove Item"
        assert result[(AlertKind.EXPIRING_SOON, 4)].message == "Tablets expires in 1 day"
        assert result[(AlertKind.EXPIRING_SOON, 5)].message == "Drops expires in 6 days"
        assert result[(AlertKind.EXPIRING_SOON, 5)].action_label == "Update Item"

    def test_one_record_can_raise_several_alerts(self, config):
        record = make_record(quantity=1, low_stock_threshold=10, expiry_days=2)
        result = alerts.generate_alerts([record], config, TODAY)
        assert kinds(result) == ["critical-low", "expiring-soon"]

    def test_critical_low_boundary(self, config):
        at_half = make_record(id=1, quantity=5, low_stock_threshold=10)
        above_half = make_record(id=2, quantity=6, low_stock_threshold=10)
        odd = make_record(id=3, quantity=3, low_stock_threshold=7)

        result = alerts.generate_alerts([at_half, above_half, odd], config, TODAY)
        assert [a.record_id for a in result] == [1, 3]

    @pytest.mark.parametrize("threshold", [0, 1])
    def test_degenerate_thresholds_never_critical(self, config, threshold):
        record = make_record(quantity=1, low_stock_threshold=threshold)
        assert alerts.generate_alerts([record], config, TODAY) == []

    def test_critical_low_uses_default_threshold(self):
        config = EngineConfig(default_low_stock_threshold=20)
        record = make_record(quantity=10, low_stock_threshold=None)
        assert kinds(alerts.generate_alerts([record], config, TODAY)) == ["critical-low"]

    def test_expired_is_not_also_expiring_soon(self, config):
        for days in (0, -1, -7):
            record = make_record(expiry_days=days)
            assert kinds(alerts.generate_alerts([record], config, TODAY)) == ["expired"]

    def test_expiring_soon_window(self, config):
        inside = make_record(id=1, expiry_days=7)
        outside = make_record(id=2, expiry_days=8)
        result = alerts.generate_alerts([inside, outside], config, TODAY)
        assert [a.record_id for a in result] == [1]

    def test_expiring_soon_window_is_configurable(self):
        record = make_record(expiry_days=10)
        assert alerts.generate_alerts([record], EngineConfig(critical_expiry_days=14), TODAY)
        assert not alerts.generate_alerts([record], EngineConfig(), TODAY)

    def test_healthy_inventory_has_no_alerts(self, config):
        assert alerts.generate_alerts([make_record()], config, TODAY) == []

    def test_record_is_kept_but_not_serialized(self, config):
        record = make_record(quantity=0)
        alert = alerts.generate_alerts([record], config, TODAY)[0]
        assert alert.record is record
        assert "record" not in alert.model_dump()


class TestFilterAlerts:
    def test_by_kind(self, config, clinic_records):
        ranked = alerts.generate_alerts(clinic_records, config, TODAY)
        assert kinds(alerts.filter_alerts(ranked, kind="critical-low")) == ["critical-low", "critical-low"]

    def test_by_priority(self, config, clinic_records):
        ranked = alerts.generate_alerts(clinic_records, config, TODAY)
        assert kinds(alerts.filter_alerts(ranked, priority="medium")) == ["expiring-soon"]

    def test_all_keeps_everything(self, config, clinic_records):
        ranked = alerts.generate_alerts(clinic_records, config, TODAY)
        assert alerts.filter_alerts(ranked, kind="all", priority="all") == ranked

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            alerts.filter_alerts([], kind="recalled")


class TestCountAlerts:
    def test_counts(self, config, clinic_records):
        counts = alerts.count_alerts(alerts.generate_alerts(clinic_records, config, TODAY))
        assert counts["total"] == 5
        assert counts["critical-low"] == 2
        assert counts["high"] == 4
        assert counts["medium"] == 1
        assert counts["low"] == 0


class TestExpiryWatchlist:
    def test_most_urgent_first(self, config, clinic_records):
        result = alerts.expiry_watchlist(clinic_records, config, TODAY)
        # -5, 3, 15, 20 days
        assert [r.id for r in result] == [4, 5, 6, 3]
