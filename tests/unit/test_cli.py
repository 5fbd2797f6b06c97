"""Unit tests for the snapshot command-line tool."""
import json

import pytest

from merchant_feed.cli import build_parser, load_records, main
from merchant_feed.errors import SnapshotError

DOCUMENTS = [
    {
        "id": "1",
        "name": "Pizzaria Dona Rosa",
        "tags": ["pizzaria"],
        "isOpen": True,
        "rating": 4.6,
        "deliveryConfig": {"type": "neighborhood", "neighborhoodPrices": {"Centro": 5}},
    },
    {"id": "2", "name": "Casa do Açaí", "tags": ["acai"], "isOpen": False, "rating": 4.9},
    {"id": "3", "name": "Loja Suspensa", "subscriptionStatus": "suspended"},
    {"id": "4", "rating": 3.0},
]


@pytest.fixture
def snapshot(tmp_path):
    path = tmp_path / "merchants.json"
    path.write_text(json.dumps(DOCUMENTS, ensure_ascii=False), encoding="utf-8")
    return path


class TestLoadRecords:
    """Tests for load_records()."""

    def test_skips_invalid_documents(self, snapshot):
        records, skipped = load_records(snapshot)

        assert [r.id for r in records] == ["1", "2", "3"]
        assert skipped == 1

    def test_wrapped_document_list(self, tmp_path):
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"merchants": DOCUMENTS[:2]}), encoding="utf-8")

        records, skipped = load_records(path)

        assert len(records) == 2
        assert skipped == 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotError) as exc_info:
            load_records(tmp_path / "absent.json")

        assert exc_info.value.details["path"].endswith("absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(SnapshotError):
            load_records(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "object.json"
        path.write_text(json.dumps({"id": "1", "name": "Loja"}), encoding="utf-8")

        with pytest.raises(SnapshotError, match="list of merchant documents"):
            load_records(path)


class TestMain:
    """Tests for main()."""

    def test_search(self, snapshot, capsys):
        code = main([str(snapshot), "--query", "pizza", "--neighborhood", "Centro", "--at", "2024-01-01T12:00"])

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["is_search"] is True
        assert [r["name"] for r in output["results"]] == ["Pizzaria Dona Rosa"]
        assert output["results"][0]["delivery"]["text"] == "R$ 5.00"
        assert output["skipped_documents"] == 1
        assert output["total_candidates"] == 3
        assert output["visible_count"] == 2

    def test_browse_orders_open_first(self, snapshot, capsys):
        code = main([str(snapshot), "--at", "2024-01-01T12:00:00-03:00"])

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [r["name"] for r in output["results"]] == ["Pizzaria Dona Rosa", "Casa do Açaí"]
        assert output["results"][0]["delivery"]["kind"] == "select_location"

    def test_unreadable_snapshot_exit_code(self, tmp_path, capsys):
        code = main([str(tmp_path / "absent.json")])

        assert code == 1
        assert capsys.readouterr().out == ""

    def test_utc_instant_read_in_merchant_zone(self, tmp_path, capsys):
        """20:30 UTC on Monday is 17:30 in Fortaleza, inside 08:00-18:00."""
        path = tmp_path / "scheduled.json"
        doc = {"id": "1", "name": "Padaria", "schedule": {"Seg": {"isOpen": True, "open": "08:00", "close": "18:00"}}}
        path.write_text(json.dumps([doc]), encoding="utf-8")

        code = main([str(path), "--at", "2024-01-01T20:30:00+00:00"])

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["results"][0]["is_open_now"] is True
        assert output["results"][0]["closes_at"] == "18:00"

    def test_rejects_unknown_sort(self, snapshot):
        with pytest.raises(SystemExit):
            main([str(snapshot), "--sort-by", "price"])

    def test_rejects_bad_instant(self, snapshot):
        with pytest.raises(SystemExit):
            main([str(snapshot), "--at", "yesterday"])


class TestParser:
    """Tests for argument defaults."""

    def test_defaults(self, snapshot):
        args = build_parser().parse_args([str(snapshot)])

        assert args.query == ""
        assert args.category == "all"
        assert args.neighborhood is None
        assert args.sort_by == "general"
        assert args.at is None

    def test_naive_instant_uses_configured_zone(self, snapshot):
        args = build_parser().parse_args([str(snapshot), "--at", "2024-01-01T12:00"])

        assert args.at.tzinfo.key == "America/Fortaleza"
