"""
Unit tests for the span-enricher CLI.
"""

import json

import pytest

from span_enricher.cli.enrich import main, read_document
from span_enricher.errors import TermStoreError
from span_enricher.term_store import SqlTermStore


@pytest.fixture
def terms_file(tmp_path):
    path = tmp_path / "terms.jsonl"
    path.write_text(
        "\n".join(
            json.dumps(r)
            for r in [
                {"label": "canine", "features": {"taxonId": "9615"}},
                {"label": "Homo sapiens", "features": {"taxonId": "9606"}},
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def document_file(tmp_path):
    path = tmp_path / "document.json"
    path.write_text(
        json.dumps(
            {
                "tokens": [
                    {"start": 0, "end": 6, "text": "canine"},
                    {"start": 7, "end": 11, "text": "Homo"},
                    {"start": 12, "end": 19, "text": "sapiens"},
                ],
                "annotations": [
                    {"start": 0, "end": 6, "provenance": "organism_from_ncbi", "id": 1},
                    {"start": 7, "end": 19, "provenance": "urn:organism_from_ncbi", "id": 2},
                    {"start": 7, "end": 11, "provenance": "person_from_annie", "id": 3},
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


class TestCli:
    """Test load-terms and enrich subcommands end to end against SQLite."""

    def test_load_then_enrich(self, tmp_path, terms_file, document_file, capsys):
        url = f"sqlite:///{tmp_path / 'terms.db'}"
        output_path = tmp_path / "out" / "enriched.json"

        assert main(["--log-level", "WARNING", "load-terms", str(terms_file), "--term-store", url]) == 0
        assert main(
            [
                "--log-level", "WARNING",
                "enrich", str(document_file),
                "--term-store", url,
                "--output", str(output_path),
                "--batch-size", "1",
                "--summary",
            ]
        ) == 0

        output = json.loads(output_path.read_text(encoding="utf-8"))
        by_id = {a["id"]: a for a in output["annotations"]}

        assert output["success"] is True
        assert by_id[1]["features"] == {
            "majorType": "organism",
            "minorType": "organism_from_ncbi",
            "language": "en",
            "taxonId": "9615",
        }
        assert by_id[2]["features"]["taxonId"] == "9606"
        assert by_id[3]["features"] == {"provenance": "person_from_annie"}
        assert output["report"]["enriched"] == 2
        assert output["report"]["batches"] == 2
        assert "span_resolver" in output["versions"]

        stderr = capsys.readouterr().err
        assert "Number of annotations for Lookup: 3" in stderr

    def test_failed_pass_writes_partial_output(self, tmp_path, terms_file, document_file, monkeypatch, capsys):
        url = f"sqlite:///{tmp_path / 'terms.db'}"
        output_path = tmp_path / "enriched.json"
        assert main(["--log-level", "WARNING", "load-terms", str(terms_file), "--term-store", url]) == 0

        sql_lookup = SqlTermStore.lookup

        def lookup(self, label):
            if label == "homo sapiens":
                raise TermStoreError("connection reset during lookup")
            return sql_lookup(self, label)

        monkeypatch.setattr(SqlTermStore, "lookup", lookup)

        exit_code = main(
            [
                "--log-level", "WARNING",
                "enrich", str(document_file),
                "--term-store", url,
                "--output", str(output_path),
                "--batch-size", "1",
                "--workers", "1",
            ]
        )

        assert exit_code == 1
        output = json.loads(output_path.read_text(encoding="utf-8"))
        by_id = {a["id"]: a for a in output["annotations"]}

        assert output["success"] is False
        assert by_id[1]["features"]["taxonId"] == "9615"
        assert by_id[2]["features"] == {"provenance": "urn:organism_from_ncbi"}
        assert by_id[3]["features"] == {"provenance": "person_from_annie"}
        assert output["report"]["enriched"] == 1
        assert output["report"]["cancelled"] == 1
        assert len(output["errors"]) == 1
        assert "connection reset" in output["errors"][0]
        assert "connection reset" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, capsys):
        assert main(["enrich", str(tmp_path / "nope.json")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_unreachable_store(self, tmp_path, document_file, capsys):
        url = f"sqlite:///{tmp_path / 'no' / 'such' / 'dir.db'}"

        assert main(["--log-level", "WARNING", "enrich", str(document_file), "--term-store", url]) == 1
        assert "Error" in capsys.readouterr().err

    def test_read_document_rejects_bad_token(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"tokens": [{"start": 5, "end": 5, "text": ""}]}), encoding="utf-8")

        with pytest.raises(ValueError, match="invalid document"):
            read_document(path)

    def test_read_document_rejects_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="invalid JSON"):
            read_document(path)
