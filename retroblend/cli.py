"""
Command-Line Interface for RetroBlend
=====================================

Usage:
    retroblend blend <id> <id> [<id> ...] [options]
    retroblend similar <id> [--limit N]
    retroblend list

    or

    python -m retroblend.cli <command> ...

Options:
    --catalog       Catalog JSON file (default: bundled catalog or $RETROBLEND_CATALOG)
    --format        blend output format: json, simple or config (default: json)
    --keep-order    Blend in selection order instead of searching for the best path
    --output, -o    Output file path (default: stdout)
    --verbose, -v   Progress details and debug logging on stderr

Examples:
    retroblend list
    retroblend blend 86 1201 2475 --format simple
    retroblend similar 86 --limit 3
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from retroblend.blender import BlendEngine
from retroblend.aggregator import BlendResult
from retroblend.catalog import CatalogStore
from retroblend.errors import RetroBlendError
from retroblend.config import NUM_SIMILAR


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='retroblend',
        description='🕹️  RetroBlend - Blend classic games into a new game profile',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list
  %(prog)s blend 86 1201 --format simple
  %(prog)s similar 86 --limit 3

Environment Variables:
  RETROBLEND_CATALOG                 Catalog JSON file to load by default
  RETROBLEND_EXHAUSTIVE_THRESHOLD    Max selection size for exhaustive path search
  RETROBLEND_TWO_OPT_MAX_ITERATIONS  Cap on 2-opt improvements for larger selections
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--catalog',
        type=str,
        default=None,
        help='Catalog JSON file (default: bundled catalog)'
    )
    common.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    blend = subparsers.add_parser('blend', parents=[common], help='Blend two or more games')
    blend.add_argument(
        'ids',
        nargs='+',
        help='Catalog ids of the games to blend'
    )
    blend.add_argument(
        '--format',
        type=str,
        choices=['json', 'simple', 'config'],
        default='json',
        help='Output format (default: json)'
    )
    blend.add_argument(
        '--keep-order',
        action='store_true',
        help='Keep the selection order instead of searching for the best path'
    )
    blend.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output file path (default: print to stdout)'
    )

    similar = subparsers.add_parser('similar', parents=[common], help='Find similar games')
    similar.add_argument('id', help='Catalog id of the reference game')
    similar.add_argument(
        '-n', '--limit',
        type=int,
        default=NUM_SIMILAR,
        help=f'Number of similar games to show (default: {NUM_SIMILAR})'
    )

    subparsers.add_parser('list', parents=[common], help='List catalog games')

    return parser


def format_output(result: BlendResult, fmt: str) -> str:
    """Format blend output based on requested format."""
    if fmt == 'json':
        return result.to_json(indent=2)

    elif fmt == 'config':
        return json.dumps(result.to_generation_config(), indent=2, ensure_ascii=False)

    elif fmt == 'simple':
        path = result.blend_path
        lines = [
            f"🕹️  {result.name}",
            f"   {result.description}",
            "",
            f"Blend path ({path.strategy}): {' -> '.join(path.item_ids)}",
            f"   Total compatibility: {path.total_compatibility:.4f}",
            "",
            "Genres:",
        ]
        for genre, weight in result.genres.items():
            lines.append(f"   {genre:<12} {weight:.0%}")
        lines.append(f"Complexity: {result.complexity_score:.2f}")
        lines.append(f"Art styles: {', '.join(result.art_styles)}")
        lines.append("")

        if result.synergies:
            lines.append("Synergies:")
            for s in result.synergies:
                lines.append(f"   + {s.type_name}: {s.description}")
        if result.conflicts:
            lines.append("Conflicts:")
            for c in result.conflicts:
                lines.append(f"   - {c.type_name}: {c.description}")
                lines.append(f"     Fix: {c.resolution_hint}")
        if result.recommended_features:
            lines.append("Recommended features:")
            for feature in result.recommended_features:
                lines.append(f"   * {feature}")
        return '\n'.join(lines)

    return result.to_json()


def load_store(catalog: Optional[str]) -> CatalogStore:
    if catalog:
        return CatalogStore.from_json(catalog)
    return CatalogStore.default()


def run_blend(args, store: CatalogStore) -> int:
    engine = BlendEngine(store)
    progress(args, f"🧬 Blending {len(args.ids)} games...")
    result = engine.blend(args.ids, preserve_order=args.keep_order)
    output = format_output(result, args.format)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(output)
        print(f"✅ Blend saved to: {args.output}")
    else:
        print(output)
    return 0


def run_similar(args, store: CatalogStore) -> int:
    engine = BlendEngine(store)
    target = store.require(args.id)
    progress(args, f"🔍 Ranking catalog against {target.name}...")

    print(f"Games similar to {target.name} ({target.year}):")
    for i, (item_id, score) in enumerate(engine.find_similar(args.id, args.limit), 1):
        meta = store.require(item_id)
        print(f"{i:2}. {meta.name} ({meta.year}) [{item_id}]  {score:.4f}")
    return 0


def run_list(args, store: CatalogStore) -> int:
    for meta in store:
        genre = meta.primary_genre or "-"
        print(f"{meta.id:>8}  {meta.name} ({meta.year}, {genre})")
    return 0


def progress(args, message: str):
    if args.verbose:
        print(message, file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    try:
        progress(args, "📥 Loading catalog...")
        store = load_store(args.catalog)
        progress(args, f"   Games: {len(store)}")

        if args.command == 'blend':
            return run_blend(args, store)
        elif args.command == 'similar':
            return run_similar(args, store)
        return run_list(args, store)

    except RetroBlendError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
