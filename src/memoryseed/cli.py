#!/usr/bin/env python3
"""
MemorySeed CLI

Turns parsed conversation exports into memory candidates for review.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from memoryseed.api_extractor import ApiError, NetworkError
from memoryseed.candidate_store import CandidateStore, load_conversations
from memoryseed.config_manager import ConfigManager
from memoryseed.constants import EXTRACTION_BACKENDS
from memoryseed.deduplicator import dedup
from memoryseed.extraction_pipeline import MemoryExtractor

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Handlers installed by configure_logging, replaced on every call
_installed_handlers = []


def configure_logging(logs_dir: Path, verbose: bool = False):
    """Log everything to a file under logs_dir; warnings (or all, when verbose) to stderr."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()

    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        # The log file itself is only created once something is logged
        file_handler = logging.FileHandler(logs_dir / "memoryseed.log", delay=True)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)
        _installed_handlers.append(file_handler)
    except OSError as e:
        print(f"Warning: file logging disabled ({e})", file=sys.stderr)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root.addHandler(console)
    _installed_handlers.append(console)


class MemorySeedCLI:
    """Command-line interface for MemorySeed"""

    def __init__(self, config_path=None):
        self.config = ConfigManager(config_path)
        self.store = CandidateStore(self.config.get_path('candidates_file'))

    def cmd_extract(self, args):
        """Extract memory candidates from a parsed conversations file"""
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: Conversations file not found: {input_path}", file=sys.stderr)
            sys.exit(1)

        try:
            conversations = load_conversations(input_path)
        except (json.JSONDecodeError, ValueError) as e:
            logger.error("Could not read %s: %s", input_path, e)
            print(f"Error: Invalid conversations file {input_path}: {e}", file=sys.stderr)
            sys.exit(1)

        if args.backend:
            self.config.config['extraction']['backend'] = args.backend

        extractor = MemoryExtractor(config=self.config)
        backend = extractor.resolve_backend()
        quiet = getattr(args, 'quiet', False)

        def on_progress(current, total):
            if not quiet:
                print(f"Processing batch {current}/{total}...")

        if not quiet:
            print(f"🔍 Extracting from {len(conversations)} conversations ({backend} mode)")

        try:
            candidates = extractor.extract(
                conversations,
                on_progress=on_progress,
                deduplicate=False if args.no_dedup else None,
            )
        except (ApiError, NetworkError, ValueError) as e:
            logger.error("Extraction failed: %s", e)
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        store = CandidateStore(args.output) if args.output else self.store
        store.save(candidates, source=str(input_path))

        if quiet:
            return

        print(f"✓ {len(candidates)} candidates saved to {store.store_path}")
        counts = {}
        for candidate in candidates:
            counts[candidate.category] = counts.get(candidate.category, 0) + 1
        for category, count in counts.items():
            print(f"  {category.ljust(12)}: {count}")

    def cmd_dedup(self, args):
        """Deduplicate a stored candidate list"""
        source = CandidateStore(args.input) if args.input else self.store
        candidates = source.get_candidates()

        threshold = args.threshold
        if threshold is None:
            threshold = self.config.get('dedup.similarity_threshold')

        survivors = dedup(candidates, threshold=threshold)

        target = CandidateStore(args.output) if args.output else source
        target.save(survivors, source=str(source.store_path))
        print(f"✓ Kept {len(survivors)} of {len(candidates)} candidates ({target.store_path})")

    def cmd_status(self, args):
        """Show counts of stored candidates"""
        store = CandidateStore(args.file) if args.file else self.store
        stats = store.get_stats()

        print("🧠 MemorySeed Candidates")
        print("=" * 50)
        print(f"Total Candidates: {stats['total_candidates']}")
        print()

        print("📊 By Category:")
        for category, cat_stats in stats['categories'].items():
            tiers = ", ".join(f"{level}: {n}" for level, n in cat_stats['by_confidence'].items())
            print(f"  {category.ljust(12)}: {cat_stats['count']} ({tiers})")

    def cmd_config(self, args):
        """Configure MemorySeed settings"""
        if args.action == 'get':
            if not args.key:
                print("Error: config get requires a key", file=sys.stderr)
                sys.exit(1)

            value = self.config.get(args.key)
            print(f"{args.key} = {value}")

        elif args.action == 'set':
            if not args.key or args.value is None:
                print("Error: config set requires a key and a value", file=sys.stderr)
                sys.exit(1)

            # Try to parse value as JSON for complex types
            try:
                value = json.loads(args.value)
            except json.JSONDecodeError:
                value = args.value

            self.config.set(args.key, value)
            print(f"✓ Set {args.key} = {value}")

        elif args.action == 'list':
            print("Current Configuration:")
            print(json.dumps(self.config.config, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='MemorySeed - turn chat history into reviewable memories',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--config', help='Path to config.json')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log debug output to stderr')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Extract command
    extract_parser = subparsers.add_parser(
        'extract',
        help='Extract memory candidates from parsed conversations (JSON)'
    )
    extract_parser.add_argument('input', help='Parsed conversations JSON file')
    extract_parser.add_argument(
        '--backend',
        choices=list(EXTRACTION_BACKENDS),
        help='Extraction backend (default: from config)'
    )
    extract_parser.add_argument('--output', '-o', help='Candidate file (default: from config)')
    extract_parser.add_argument('--no-dedup', action='store_true', help='Keep near-duplicate candidates')
    extract_parser.add_argument('--quiet', '-q', action='store_true', help='Suppress output')

    # Dedup command
    dedup_parser = subparsers.add_parser(
        'dedup',
        help='Collapse near-duplicate candidates in a candidate file'
    )
    dedup_parser.add_argument('--input', '-i', help='Candidate file (default: from config)')
    dedup_parser.add_argument('--output', '-o', help='Output file (default: overwrite input)')
    dedup_parser.add_argument('--threshold', type=float, help='Similarity threshold (default: from config)')

    # Status command
    status_parser = subparsers.add_parser(
        'status',
        help='Show stored candidate counts'
    )
    status_parser.add_argument('--file', '-f', help='Candidate file (default: from config)')

    # Config command
    config_parser = subparsers.add_parser(
        'config',
        help='Configure MemorySeed settings'
    )
    config_parser.add_argument(
        'action',
        choices=['get', 'set', 'list'],
        help='Config action'
    )
    config_parser.add_argument('key', nargs='?', help='Config key (dot notation)')
    config_parser.add_argument('value', nargs='?', help='Config value')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    cli = MemorySeedCLI(config_path=args.config)
    configure_logging(cli.config.get_path('logs_dir'), verbose=args.verbose)

    command_map = {
        'extract': cli.cmd_extract,
        'dedup': cli.cmd_dedup,
        'status': cli.cmd_status,
        'config': cli.cmd_config,
    }

    handler = command_map.get(args.command)
    if handler:
        handler(args)
    else:
        print(f"Unknown command: {args.command}")
        sys.exit(1)


if __name__ == '__main__':
    main()
