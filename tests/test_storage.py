"""Tests for the SQLite result writer."""

import pytest

from blocktuple.api.rated import ValidatorPool
from blocktuple.storage import SCOPE_HORIZON, SCOPE_TARGET_EPOCH, SQLiteWriter


@pytest.fixture
def writer(tmp_path):
    with SQLiteWriter(tmp_path / "results.db") as w:
        yield w


class TestSQLiteWriter:
    """Tests for SQLiteWriter."""

    def test_schema_created_empty(self, writer):
        assert writer.get_stats() == {
            "validator_pools": 0,
            "pmf": 0,
            "run_length_stats": 0,
            "target_slot_hits": 0,
            "epoch_projections": 0,
        }

    def test_pools_latest_snapshot(self, writer):
        writer.write_pools([ValidatorPool("Lido", 0.3)], ts=100.0)
        writer.write_pools([ValidatorPool("Kraken", 0.07), ValidatorPool("Lido", 0.31)], ts=200.0)

        pools = writer.get_pools()
        assert [p["pool_id"] for p in pools] == ["Kraken", "Lido"]
        assert writer.get_pools(ts=100.0)[0]["network_penetration"] == pytest.approx(0.3)

    def test_pmf_roundtrip_latest(self, writer):
        writer.write_pmf("Lido", [[0, 0.5, 0.49], [1, 0.5, 0.51]], ts=1.0)
        writer.write_pmf("Lido", [[0, 0.2, 0.21], [1, 0.8, 0.79]], ts=2.0)

        rows = writer.get_pmf("Lido")
        assert [r["run_length"] for r in rows] == [0, 1]
        assert rows[1]["exact_pmf"] == pytest.approx(0.8)
        assert rows[1]["monte_carlo_pmf"] == pytest.approx(0.79)

    def test_run_length_stats_by_scope(self, writer):
        writer.write_run_length_stats("Lido", SCOPE_HORIZON, [[0, 0.0, 0.0], [1, 12.0, 0.1]])
        writer.write_run_length_stats("Lido", SCOPE_TARGET_EPOCH, [[0, 0.0, 0.0], [1, 2.0, 0.01]])

        horizon = writer.get_run_length_stats("Lido", SCOPE_HORIZON)
        target = writer.get_run_length_stats("Lido", SCOPE_TARGET_EPOCH)
        assert horizon[1]["median_count"] == pytest.approx(12.0)
        assert target[1]["odds"] == pytest.approx(0.01)

    def test_unknown_scope(self, writer):
        with pytest.raises(ValueError, match="Unknown scope"):
            writer.write_run_length_stats("Lido", "weekly", [])

    def test_target_slot_hits_and_projection(self, writer):
        writer.write_target_slot_hits("Lido", 225, "random", 0.0)
        writer.write_projection("Lido", [[1, 1.0], [2, 0.25]])

        hits = writer.get_target_slot_hits("Lido")
        assert hits[0]["target_slot"] == "random"
        assert hits[0]["target_epoch"] == 225
        assert [r["probability"] for r in writer.get_projection("Lido")] == pytest.approx([1.0, 0.25])

    def test_close_is_idempotent(self, tmp_path):
        w = SQLiteWriter(tmp_path / "x.db")
        w.close()
        w.close()
