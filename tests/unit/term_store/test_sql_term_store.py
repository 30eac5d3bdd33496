"""
Unit tests for the SQL term store and the JSON lines loader.
"""

import json

import pytest

from span_enricher.enrichment import enrich_document
from span_enricher.errors import TermStoreConnectionError, TermStoreError
from span_enricher.models import EntityAnnotation
from span_enricher.term_store import SqlTermStore, load_terms, read_terms_jsonl
from tests.fixtures.term_store import ORGANISM, ORGANISM_TEXT, span


class TestSqlTermStore:
    """Test connect/lookup/disconnect against SQLite."""

    def test_lookup_hit(self, sqlite_store):
        assert sqlite_store.lookup("canine") == {"taxonId": "9615"}

    def test_lookup_miss(self, sqlite_store):
        assert sqlite_store.lookup("felis catus") is None

    def test_labels_stored_lowercase(self, tmp_path):
        store = SqlTermStore(f"sqlite:///{tmp_path / 'terms.db'}")
        with store:
            load_terms(store, [{"label": "Homo Sapiens", "features": {"taxonId": "9606"}}])

            assert store.lookup("homo sapiens") == {"taxonId": "9606"}
            assert store.lookup("Homo Sapiens") is None

    def test_load_terms_replaces_existing(self, sqlite_store):
        load_terms(sqlite_store, [{"label": "canine", "features": {"taxonId": "9615", "rank": "no rank"}}])

        assert sqlite_store.lookup("canine") == {"taxonId": "9615", "rank": "no rank"}

    def test_lookup_before_connect(self, tmp_path):
        store = SqlTermStore(f"sqlite:///{tmp_path / 'terms.db'}")

        with pytest.raises(TermStoreError, match="not connected"):
            store.lookup("canine")

    def test_missing_table_is_store_error(self, tmp_path):
        store = SqlTermStore(f"sqlite:///{tmp_path / 'empty.db'}")
        with store:
            assert not store.has_terms_table()
            with pytest.raises(TermStoreError):
                store.lookup("canine")

    def test_unreachable_database(self, tmp_path):
        store = SqlTermStore(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'terms.db'}")

        with pytest.raises(TermStoreConnectionError):
            store.connect()

        assert not store.connected

    def test_connect_is_idempotent(self, sqlite_store):
        sqlite_store.connect()

        assert sqlite_store.connected

    def test_disconnect_twice(self, tmp_path):
        store = SqlTermStore(f"sqlite:///{tmp_path / 'terms.db'}")
        store.connect()
        store.disconnect()
        store.disconnect()

        assert not store.connected

    def test_enrich_document_against_sqlite(self, tmp_path, organism_tokens, test_settings):
        url = f"sqlite:///{tmp_path / 'terms.db'}"
        with SqlTermStore(url) as store:
            load_terms(
                store,
                [
                    {"label": "homo sapiens", "features": {"taxonId": "9606"}},
                    {"label": "mus musculus", "features": {"taxonId": "10090"}},
                ],
            )

        annotations = [
            span(ORGANISM_TEXT, "Homo sapiens", annotation_id=i) if i % 2 == 0
            else span(ORGANISM_TEXT, "Mus musculus", annotation_id=i)
            for i in range(12)
        ]
        annotations.append(EntityAnnotation(0, 4, ORGANISM, annotation_id=12))

        report = enrich_document(
            organism_tokens, annotations, SqlTermStore(url), settings=test_settings, max_workers=3
        )

        assert report.enriched == 12
        assert report.missed == 1
        assert annotations[0].features["taxonId"] == "9606"
        assert annotations[1].features["taxonId"] == "10090"
        assert annotations[12].features == {"provenance": ORGANISM}


class TestReadTermsJsonl:
    """Test reading term records from JSON lines."""

    def test_reads_records(self, tmp_path):
        path = tmp_path / "terms.jsonl"
        path.write_text(
            json.dumps({"label": "canine", "features": {"taxonId": "9615"}})
            + "\n\n"
            + json.dumps({"label": "Felis catus", "features": {"taxonId": "9685"}})
            + "\n",
            encoding="utf-8",
        )

        records = list(read_terms_jsonl(path))

        assert [r["label"] for r in records] == ["canine", "Felis catus"]

    def test_missing_label(self, tmp_path):
        path = tmp_path / "terms.jsonl"
        path.write_text(json.dumps({"features": {}}) + "\n", encoding="utf-8")

        with pytest.raises(ValueError, match="label"):
            list(read_terms_jsonl(path))

    def test_features_must_be_object(self, tmp_path):
        path = tmp_path / "terms.jsonl"
        path.write_text(json.dumps({"label": "canine", "features": [1, 2]}) + "\n", encoding="utf-8")

        with pytest.raises(ValueError, match="features"):
            list(read_terms_jsonl(path))
