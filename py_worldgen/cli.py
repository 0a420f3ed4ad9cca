"""
Command line interface for generating themed worlds.

Usage:
    py-worldgen list
    py-worldgen generate DARK_FOREST --seed 12345
    py-worldgen generate LAVA_ZONE --size 2000 --filename my_lava_map.json
    py-worldgen all
    py-worldgen random 10 --seed 7
    py-worldgen random-themes 5 --seed 7
    py-worldgen mix DARK_FOREST MYSTICAL_SWAMP --ratio 0.4
"""

import argparse
import sys
from typing import List, Optional

import structlog

from .config import settings
from .config.themes import MAP_THEMES, Theme, get_theme, mix_themes, random_theme
from .config.variations import MAP_VARIATIONS, THEME_COMBINATIONS, apply_variation
from .core.generator import WorldGenerator
from .core.seeded_prng import SeededRandom
from .errors import ConfigurationError, UnknownThemeError
from .storage import MapIndexEntry, MapStore
from .utils.logging import configure_logging

logger = structlog.get_logger()

DEFAULT_SEED = 12345
RANDOM_MAP_SIZES = (500, 800, 1000, 1200, 1500)
RANDOM_THEME_INDEX = "random_themes_index.json"

THEME_NAME_PREFIXES = (
    "Mystic", "Ancient", "Forgotten", "Enchanted", "Cursed",
    "Ethereal", "Primal", "Celestial", "Arcane", "Fabled",
    "Haunted", "Sacred", "Mythic", "Eldritch", "Verdant",
    "Twilight", "Radiant", "Shadowy", "Astral", "Crystalline",
)
THEME_NAME_SUFFIXES = (
    "Forest", "Mountains", "Wasteland", "Sanctuary", "Realm",
    "Peaks", "Valley", "Caverns", "Highlands", "Depths",
    "Marshes", "Tundra", "Jungle", "Isles", "Dunes",
    "Groves", "Canyons", "Plateau", "Nexus", "Expanse",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-worldgen", description="Generate deterministic themed game worlds"
    )
    parser.add_argument("--output-dir", help=f"Output directory (default: {settings.output_dir})")
    parser.add_argument("--log-level", help="Log level (default: settings.log_level)")
    parser.add_argument("--log-format", choices=["json", "plain"], help="Log output format")

    commands = parser.add_subparsers(dest="command")

    commands.add_parser("list", help="List available themes")

    generate = commands.add_parser("generate", help="Generate one themed map")
    generate.add_argument("theme", help="Theme name, e.g. DARK_FOREST")
    generate.add_argument("--seed", type=int, help="Random seed")
    generate.add_argument("--size", type=float, help="Map size in world units")
    generate.add_argument("--filename", help="Output file name")
    generate.add_argument("--no-compact", action="store_true", help="Keep individual trees")
    generate.add_argument("--no-minimap", action="store_true", help="Skip minimap rendering")

    generate_all = commands.add_parser("all", help="Generate a sample map for every theme")
    generate_all.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed")
    generate_all.add_argument("--no-minimap", action="store_true", help="Skip minimap rendering")

    random_maps = commands.add_parser("random", help="Generate maps from preset variations")
    random_maps.add_argument("count", nargs="?", type=int, default=20, help="Number of maps")
    random_maps.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed")
    random_maps.add_argument("--size", type=float, help="Fixed map size for every map")
    random_maps.add_argument("--no-minimap", action="store_true", help="Skip minimap rendering")

    random_themes = commands.add_parser("random-themes", help="Generate maps with random themes")
    random_themes.add_argument("count", nargs="?", type=int, default=20, help="Number of maps")
    random_themes.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed")
    random_themes.add_argument("--no-minimap", action="store_true", help="Skip minimap rendering")

    mix = commands.add_parser("mix", help="Generate a map from two mixed themes")
    mix.add_argument("base", help="Dominant theme")
    mix.add_argument("mixin", help="Theme mixed in")
    mix.add_argument("--ratio", type=float, default=0.5, help="Share of the mixin theme (0-1)")
    mix.add_argument("--name", help="Display name of the mixed theme")
    mix.add_argument("--seed", type=int, help="Random seed")
    mix.add_argument("--size", type=float, help="Map size in world units")
    mix.add_argument("--no-minimap", action="store_true", help="Skip minimap rendering")

    return parser


def _print_entry(entry: MapIndexEntry, store: MapStore) -> None:
    print(f"✓ {entry.name} saved to: {store.output_dir / entry.filename}")
    print(f"  - Zones: {entry.stats.get('zones', 0)}")
    print(f"  - Structures: {entry.stats.get('structures', 0)}")
    print(f"  - Paths: {entry.stats.get('paths', 0)}")
    print(f"  - Environment objects: {entry.stats.get('environment', 0)}")
    if entry.minimap:
        print(f"  - Minimap generated: {len(entry.minimap.images)} images")


def cmd_list(args, store: MapStore) -> int:
    print("Available map themes:")
    for key, theme in MAP_THEMES.items():
        print(f"  {key}: {theme.description}")
    return 0


def cmd_generate(args, store: MapStore) -> int:
    theme = get_theme(args.theme)
    generator = WorldGenerator(seed=args.seed, map_size=args.size)
    document = generator.generate(theme, compact=not args.no_compact)

    map_id = f"{theme.key.lower()}_custom_{generator.seed}"
    entry = store.publish(
        document,
        map_id,
        filename=args.filename,
        minimap=not args.no_minimap,
        name=f"Custom {theme.name}",
    )
    _print_entry(entry, store)
    return 0


def cmd_all(args, store: MapStore) -> int:
    entries = []
    for key, theme in MAP_THEMES.items():
        print(f"\n=== Generating {theme.name} ===")
        document = WorldGenerator(seed=args.seed).generate(theme)
        entry = store.publish(document, key.lower(), minimap=not args.no_minimap)
        _print_entry(entry, store)
        entries.append(entry)

    print(f"\nGenerated {len(entries)} maps, index: {store.index_path}")
    return 0


def cmd_random(args, store: MapStore) -> int:
    rng = SeededRandom(args.seed)
    theme_keys = list(MAP_THEMES)
    variation_count = int(args.count * 0.7)

    for i in range(variation_count):
        theme = get_theme(rng.choice(theme_keys))
        variation = rng.choice(MAP_VARIATIONS)
        map_size = args.size or rng.choice(RANDOM_MAP_SIZES)
        seed = int(rng.random() * 1_000_000)

        print(f"\n=== Generating Random Map {i + 1}/{args.count}: {variation.name} {theme.name} ===")
        varied = apply_variation(theme, variation, rng)
        document = WorldGenerator(seed=seed, map_size=map_size).generate(varied)
        entry = store.publish(
            document,
            f"random_{theme.key.lower()}_{variation.name.lower()}_{i}",
            minimap=not args.no_minimap,
            name=f"{variation.name} {theme.name}",
            description=f"{variation.name} variation of {theme.description}",
            variation=variation.name,
        )
        _print_entry(entry, store)

    for i in range(args.count - variation_count):
        combination = THEME_COMBINATIONS[i % len(THEME_COMBINATIONS)]
        map_size = args.size or rng.choice(RANDOM_MAP_SIZES)
        seed = int(rng.random() * 1_000_000)

        number = variation_count + i + 1
        print(f"\n=== Generating Custom Theme Map {number}/{args.count}: {combination.name} ===")
        document = WorldGenerator(seed=seed, map_size=map_size).generate(combination.build())
        map_id = "custom_" + "_".join(combination.name.lower().split()) + f"_{i}"
        entry = store.publish(document, map_id, minimap=not args.no_minimap)
        _print_entry(entry, store)

    print(f"\nGenerated {args.count} random maps, index: {store.index_path}")
    return 0


def cmd_random_themes(args, store: MapStore) -> int:
    rng = SeededRandom(args.seed)
    random_store = MapStore(store.output_dir, RANDOM_THEME_INDEX)

    for i in range(args.count):
        prefix = rng.choice(THEME_NAME_PREFIXES)
        suffix = rng.choice(THEME_NAME_SUFFIXES)
        name = f"{prefix} {suffix}"
        description = f"A unique {suffix.lower()} with {prefix.lower()} characteristics"

        seed = int(rng.random() * 1_000_000)
        map_size = rng.choice(RANDOM_MAP_SIZES)
        theme = random_theme(rng, name, description)

        print(f"\n=== Generating Random Theme {i + 1}/{args.count}: {name} ===")
        document = WorldGenerator(seed=seed, map_size=map_size).generate(theme)
        entry = random_store.publish(
            document,
            f"random_theme_{theme.key.lower()}_{i}",
            minimap=not args.no_minimap,
        )
        _print_entry(entry, random_store)

    print(f"\nGenerated {args.count} random themed maps, index: {random_store.index_path}")
    return 0


def cmd_mix(args, store: MapStore) -> int:
    base = get_theme(args.base)
    mixin = get_theme(args.mixin)
    try:
        theme: Theme = mix_themes(base, mixin, args.ratio, name=args.name)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    generator = WorldGenerator(seed=args.seed, map_size=args.size)
    document = generator.generate(theme)
    entry = store.publish(
        document,
        f"custom_{theme.key.lower()}_{generator.seed}",
        minimap=not args.no_minimap,
    )
    _print_entry(entry, store)
    return 0


COMMANDS = {
    "list": cmd_list,
    "generate": cmd_generate,
    "all": cmd_all,
    "random": cmd_random,
    "random-themes": cmd_random_themes,
    "mix": cmd_mix,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(args.log_level, args.log_format)
    store = MapStore(args.output_dir)

    try:
        return COMMANDS[args.command](args, store)
    except UnknownThemeError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Available themes: {', '.join(e.available)}", file=sys.stderr)
        return 1
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error("Failed to write map output", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
