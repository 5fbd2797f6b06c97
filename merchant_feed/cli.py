"""Command-line entry point: rank a JSON merchant snapshot.

Usage:
    merchant-feed snapshot.json --query pizza --neighborhood Centro
    python -m merchant_feed snapshot.json --category lanches --sort-by delivery
"""
import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError

from merchant_feed.config import get_settings
from merchant_feed.errors import SnapshotError
from merchant_feed.models import ConsumerContext, MerchantRecord, SortCriteria
from merchant_feed.services.clock import FixedClock, resolve_zone
from merchant_feed.services.feed import FeedAssembler
from merchant_feed.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def load_records(path: Path) -> Tuple[List[MerchantRecord], int]:
    """Read merchant documents from a JSON file.

    The file holds either a list of documents or ``{"merchants": [...]}``.
    Documents failing validation are logged and skipped.

    Returns:
        (valid records, number of skipped documents)

    Raises:
        SnapshotError: If the file cannot be read or is not a document list
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Cannot read snapshot: {e}", details={"path": str(path)}) from e

    if isinstance(raw, dict):
        raw = raw.get("merchants")
    if not isinstance(raw, list):
        raise SnapshotError("Snapshot must be a list of merchant documents", details={"path": str(path)})

    records: List[MerchantRecord] = []
    skipped = 0
    for index, doc in enumerate(raw):
        try:
            records.append(MerchantRecord.model_validate(doc))
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "merchant_document_invalid",
                index=index,
                merchant_id=doc.get("id") if isinstance(doc, dict) else None,
                errors=e.error_count(),
            )
    return records, skipped


def _parse_instant(value: str) -> datetime:
    try:
        instant = datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid ISO datetime: {value}") from e
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=resolve_zone())
    return instant


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="merchant-feed",
        description="Rank and annotate a merchant snapshot for one consumer",
    )
    parser.add_argument("snapshot", type=Path, help="JSON file with merchant documents")
    parser.add_argument("--query", default="", help="Free-text search")
    parser.add_argument("--category", default="all", help="Category id filter (browse only)")
    parser.add_argument("--neighborhood", default=None, help="Consumer neighborhood")
    parser.add_argument(
        "--sort-by",
        default=SortCriteria.GENERAL.value,
        choices=[c.value for c in SortCriteria],
        help="Browse ordering after open/closed",
    )
    parser.add_argument(
        "--at",
        type=_parse_instant,
        default=None,
        help="Evaluation instant (ISO 8601); naive values use the configured timezone",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    configure_logging(settings.log_level, stream=sys.stderr)
    args = build_parser().parse_args(argv)

    try:
        records, skipped = load_records(args.snapshot)
    except SnapshotError as e:
        logger.error("snapshot_load_failed", error=e.message, **e.details)
        return 1

    context = ConsumerContext(
        query=args.query,
        category_id=args.category,
        neighborhood=args.neighborhood,
        sort_by=SortCriteria(args.sort_by),
    )
    clock = FixedClock(args.at) if args.at else None
    feed = FeedAssembler(clock=clock, settings=settings).assemble(records, context)

    output = feed.to_dict()
    output["skipped_documents"] = skipped
    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
