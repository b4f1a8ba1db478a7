"""Tests for the query helpers and DatasetStore against real SQLite schema files."""

import pytest

from explorer_api.data_access import DatasetStore, Query, quote_identifier, select, table_name
from explorer_api.errors import InvalidIdentifierError, StoreUnavailableError


# ---------------------------------------------------------------------------
# Identifiers & query composition
# ---------------------------------------------------------------------------

class TestIdentifiers:
    def test_quotes_valid_name(self):
        assert quote_identifier("missingdateofbirth_20200101") == '"missingdateofbirth_20200101"'

    @pytest.mark.parametrize("name", ["", "a-b", "x; DROP TABLE y", 'q"uote', "a b", "a.b"])
    def test_rejects_invalid_name(self, name):
        with pytest.raises(InvalidIdentifierError):
            quote_identifier(name)

    def test_table_name_without_suffix(self):
        assert table_name("foo", "3") == "foo_3"

    def test_table_name_with_suffix(self):
        assert table_name("foo", "3", "logging") == "foo_3_logging"

    def test_table_name_rejects_bad_epoch(self):
        with pytest.raises(InvalidIdentifierError):
            table_name("foo", "3 OR 1=1")


class TestSelect:
    def test_plain_select(self):
        q = select("foo", "foo_3")
        assert q == Query('SELECT * FROM "foo"."foo_3"', ())

    def test_all_clauses(self):
        q = select(
            "foo", "updatecount_stats",
            where=["epoch = ?"], params=("3",),
            order_by="addedtime DESC", limit=1
        )
        assert q.sql == (
            'SELECT * FROM "foo"."updatecount_stats" '
            'WHERE epoch = ? ORDER BY addedtime DESC LIMIT ?'
        )
        assert q.params == ("3", 1)

    def test_group_by(self):
        q = select("foo", "foo_3_logging", "decision, COUNT(*) AS num", group_by="decision")
        assert q.sql.endswith("GROUP BY decision")


# ---------------------------------------------------------------------------
# DatasetStore
# ---------------------------------------------------------------------------

class TestDatasetStoreSetup:
    def test_missing_metadata_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DatasetStore(data_dir=str(tmp_path), metadata_schema="wikiloop", datasets=[])

    def test_missing_dataset_file_is_skipped(self, store):
        with pytest.raises(StoreUnavailableError):
            store.dump_rows("missingdateofdeath", "20200101")

    def test_store_is_read_only(self, store):
        with pytest.raises(StoreUnavailableError):
            store.run(Query('DELETE FROM "missingdateofbirth"."updatecount_stats"'))


class TestMetadata:
    def test_list_datasets(self, store):
        assert store.list_datasets() == ["missingdateofbirth", "catfacts"]

    def test_epochs_newest_first(self, store):
        assert store.get_epochs("missingdateofbirth") == ["20200201", "20200101"]

    def test_no_published_epochs(self, store):
        assert store.get_epochs("missingplaceofbirth") == []

    def test_missing_epoch_table_raises(self, store):
        with pytest.raises(StoreUnavailableError):
            store.get_epochs("missingdateofdeath")


class TestDatasetQueries:
    def test_dump_rows(self, store):
        rows = store.dump_rows("missingdateofbirth", "20200101")
        assert rows == [{"qNumber": "Q1", "label": "Universe", "languages": "en"}]

    def test_dump_unknown_epoch_raises(self, store):
        with pytest.raises(StoreUnavailableError):
            store.dump_rows("missingdateofbirth", "19990101")

    def test_latest_stats(self, store):
        rows = store.latest_stats("missingdateofbirth", "20200201")
        assert len(rows) == 1
        assert rows[0]["addedtime"] == "2020-02-03 00:00:00"
        assert rows[0]["updatecount"] == 9

    def test_latest_stats_filters_epoch(self, store):
        rows = store.latest_stats("missingdateofbirth", "20200101")
        assert rows[0]["updatecount"] == 3

    def test_fetch_with_clauses(self, store):
        rows = store.fetch(
            "missingdateofbirth", "20200201",
            columns='"qNumber"', where=['"qNumber" = ?'], params=("Q42",)
        )
        assert rows == [{"qNumber": "Q42"}]


class TestGameLogQueries:
    def test_decision_counts(self, store):
        rows = store.decision_counts("missingdateofbirth", "20200201")
        assert {r["decision"]: r["num"] for r in rows} == {"approve": 6, "reject": 4}

    def test_leaderboard_ordered_by_count(self, store):
        rows = store.leaderboard("missingdateofbirth", "20200201")
        assert rows == [
            {"user": "alice", "num": 6},
            {"user": "bob", "num": 3},
            {"user": "carol", "num": 1},
        ]

    def test_edits_by_day(self, store):
        assert store.edits_by_day("missingdateofbirth", "20200201") == [
            ("2024-01-01", 3),
            ("2024-01-02", 5),
            ("2024-01-03", 2),
        ]

    def test_missing_logging_table_raises(self, store):
        with pytest.raises(StoreUnavailableError):
            store.edits_by_day("missingdateofbirth", "20200101")
