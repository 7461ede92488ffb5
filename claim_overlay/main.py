"""Main script for running a headless claim overlay session on an HTML file."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .domain.models.verification import RATING_LABELS
from .infrastructure.dependencies import ServiceContainer
from .infrastructure.host.soup_page import SoupHostPage
from .infrastructure.settings.env_settings import load_config
from .infrastructure.timing.asyncio_scheduler import AsyncioScheduler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="claim-overlay",
        description="Detect, highlight and verify factual claims in an HTML page.",
    )
    parser.add_argument("page", help="Path to an HTML file")
    parser.add_argument("--url", default=None, help="URL the page was served from")
    parser.add_argument("--verify", action="store_true", help="Verify claims after scanning")
    parser.add_argument("--provider", choices=["mock", "api"], default=None, help="Verification provider")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


async def run(args: argparse.Namespace) -> int:
    """Scan the page, optionally verify, and print the results."""
    config = load_config(args.env_file)
    if args.provider:
        config = config.model_copy(update={"provider": args.provider})
    logging.getLogger().setLevel(logging.DEBUG if args.verbose else config.log_level)

    container = ServiceContainer(config)
    page = SoupHostPage.from_file(args.page, url=args.url)
    session = await container.create_session(page, AsyncioScheduler())

    print("Claim Overlay - headless page scan")
    print("----------------------------------")
    if not session.start(auto_scan=False):
        print(f"Overlay is disabled for {session.host_name or 'this page'}")
        return 1

    try:
        tracked = session.scan_page(verify=args.verify)
        if args.verify:
            await session.wait_for_verifications()

        print(f"\nFound {len(tracked)} claims on {page.url}\n")
        for index, claim in enumerate(tracked, 1):
            print(f"{index}. {claim.claim_text}")
            rects = ", ".join(f"({r.left:g},{r.top:g} {r.width:g}x{r.height:g})" for r in claim.snapshot)
            print(f"   Rects: {rects or 'none'}")
            if claim.verification is not None:
                verification = claim.verification
                print(f"   Rating: {RATING_LABELS[verification.rating]} ({verification.confidence:.0%})")
                if verification.summary:
                    print(f"   {verification.summary}")
    finally:
        session.teardown()
        await container.shutdown()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
