"""
Run the analysis pipeline for one Freshdesk ticket and print the result

사용법:
    python -m ticket_manager.scripts.analyze_ticket <ticket_id>
    python -m ticket_manager.scripts.analyze_ticket 12345 --no-synthesis --artwork
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env before settings are first read
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from ticket_manager.exceptions import TicketManagerError  # noqa: E402
from ticket_manager.models.schemas import AnalysisOptions  # noqa: E402
from ticket_manager.services.orchestrator import build_orchestrator  # noqa: E402
from ticket_manager.utils.logger import get_logger  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze a Freshdesk ticket")
    parser.add_argument("ticket_id", help="Freshdesk ticket ID")
    parser.add_argument("--no-kb", action="store_true", help="Skip the knowledge base agent")
    parser.add_argument("--no-product", action="store_true", help="Skip the product agent")
    parser.add_argument("--no-price", action="store_true", help="Skip the price agent")
    parser.add_argument("--artwork", action="store_true", help="Include the artwork placeholder")
    parser.add_argument("--no-synthesis", action="store_true", help="Skip reply drafting")
    return parser.parse_args(argv)


def options_from_args(args: argparse.Namespace) -> AnalysisOptions:
    return AnalysisOptions(
        include_kb=not args.no_kb,
        include_product=not args.no_product,
        include_price=not args.no_price,
        include_artwork=args.artwork,
        include_synthesis=not args.no_synthesis
    )


async def main(argv=None) -> int:
    args = parse_args(argv)
    orchestrator = build_orchestrator()

    try:
        result = await orchestrator.analyze_ticket(args.ticket_id, options_from_args(args))
    except TicketManagerError as e:
        logger.error(f"{e.error} ({e.status_code}): {e.details}")
        return 1

    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
    return 0


def run():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
