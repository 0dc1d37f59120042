"""Main entry point for the content scoring system."""

import argparse
import logging
import sys
from pathlib import Path

from .config.loader import load_config
from .agent.scan_agent import ScanAgent
from .tools.storage_tool import load_leaderboard


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Content scoring system: GRAAF, CRAFT and technical SEO scores for web pages"
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config/config.yaml",
        help="Path to config file (YAML or JSON)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip the LLM validator and score detected counts",
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Fetch pages over plain HTTP instead of rendering them in a browser",
    )
    parser.add_argument(
        "--leaderboard",
        type=int,
        metavar="N",
        default=0,
        help="Print the top N stored pages after the run",
    )
    parser.add_argument("urls", nargs="*", help="URLs to scan (overrides scan_urls)")
    args = parser.parse_args(argv)

    # Resolve paths relative to project root
    project_root = Path(__file__).resolve().parent.parent.parent
    config_path = Path(args.config)
    if not config_path.is_absolute():
        config_path = project_root / config_path

    if not config_path.exists():
        print(f"Config not found: {config_path}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = load_config(config_path)
    if args.urls:
        config.scan_urls = args.urls
    if args.no_validate:
        config.validator.enabled = False
    if args.http:
        config.render_policy.use_browser = False
    if not Path(config.output_config.storage_path).is_absolute():
        config.output_config.storage_path = str(
            project_root / config.output_config.storage_path
        )

    agent = ScanAgent(config)
    results = agent.run()
    print(f"Scanned {len(results)} pages. Results saved to {config.output_config.storage_path}")

    if args.leaderboard:
        for rank, entry in enumerate(
            load_leaderboard(config.output_config.storage_path, args.leaderboard), 1
        ):
            flag = " *" if entry["validation_fallback"] else ""
            print(f"{rank:>3}. {entry['total']:>3}/100 {entry['quality']:<18} {entry['url']}{flag}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
