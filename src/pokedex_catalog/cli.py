"""Command line interface for browsing the species catalog."""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, Sequence

from .codec import move_to_dict, species_to_dict
from .config import load_settings
from .data import load_default_catalog
from .errors import CatalogError
from .models import Species
from .observability import configure_logging, generate_trace_id, get_logger
from .types import ElementType


def _output_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output", choices=["text", "json"], default="text")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pokedex-catalog",
        description="Inspect the bundled species catalog",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List every species")
    list_parser.add_argument(
        "--type",
        dest="element_type",
        choices=[t.value for t in ElementType],
        help="Only list species carrying this type",
    )
    _output_flag(list_parser)

    show_parser = subparsers.add_parser("show", help="Show one species")
    show_parser.add_argument("species", help="Species id (e.g. 4 or #4) or name")
    _output_flag(show_parser)

    moves_parser = subparsers.add_parser("moves", help="List every shared move")
    _output_flag(moves_parser)

    exp_parser = subparsers.add_parser(
        "experience", help="Experience needed for a species to reach a level"
    )
    exp_parser.add_argument("species", help="Species id or name")
    exp_parser.add_argument("--level", type=int, required=True)
    _output_flag(exp_parser)

    export_parser = subparsers.add_parser("export", help="Write the catalog table as CSV")
    export_parser.add_argument("csv_path", type=Path)

    return parser


def _describe(species: Species) -> str:
    stats = species.base_stats
    lines = [
        f"#{species.id:03d} {species.name} ({'/'.join(t.value for t in species.types)})",
        f"Growth rate: {species.growth_rate.value}, base experience {species.base_experience}",
        (
            f"HP {stats.hp} / Atk {stats.attack} / Def {stats.defense} / "
            f"SpA {stats.special_attack} / SpD {stats.special_defense} / Spe {stats.speed} "
            f"(total {stats.total})"
        ),
        "Starting moves: " + ", ".join(m.name for m in species.starting_moves),
        "Learnable moves: " + ", ".join(sorted(m.name for m in species.available_moves)),
    ]
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    trace_id = generate_trace_id()

    try:
        settings = load_settings()
        configure_logging(settings.log_level)
        logger = get_logger(__name__)
        catalog = load_default_catalog()

        if args.command == "list":
            entries = catalog.by_type(args.element_type) if args.element_type else list(catalog)
            if args.output == "json":
                print(json.dumps([species_to_dict(s) for s in entries], indent=2))
            else:
                for species in entries:
                    types = "/".join(t.value for t in species.types)
                    print(f"#{species.id:03d} {species.name:<12} {types}")

        elif args.command == "show":
            species = catalog.lookup(args.species)
            if args.output == "json":
                print(json.dumps(species_to_dict(species), indent=2))
            else:
                print(_describe(species))

        elif args.command == "moves":
            if args.output == "json":
                print(json.dumps([move_to_dict(m) for m in catalog.moves], indent=2))
            else:
                for move in catalog.moves:
                    power = move.power or "-"
                    accuracy = move.accuracy if move.accuracy is not None else "-"
                    print(
                        f"{move.name:<14} {move.type.value:<9} {move.category:<8} "
                        f"pow {power!s:>3} acc {accuracy!s:>3} pp {move.pp}"
                    )

        elif args.command == "experience":
            species = catalog.lookup(args.species)
            needed = species.experience_for_level(args.level)
            result: Dict[str, Any] = {
                "species": species.name,
                "growth_rate": species.growth_rate.value,
                "level": args.level,
                "experience": needed,
            }
            if args.output == "json":
                print(json.dumps(result, indent=2))
            else:
                print(
                    f"{species.name} ({species.growth_rate.value}) needs {needed} "
                    f"experience to reach level {args.level}."
                )

        elif args.command == "export":
            from .tables import export_catalog

            path = export_catalog(catalog, args.csv_path)
            print(f"Wrote {len(catalog)} species to {path}.")

        logger.info(
            "cli_command_completed",
            extra={"event": "cli_command_completed", "trace_id": trace_id, "command": args.command},
        )
    except CatalogError as exc:
        get_logger(__name__).warning(
            "cli_command_failed",
            extra={"event": "cli_command_failed", "trace_id": trace_id, "error": exc.to_payload()},
        )
        parser.error(f"{exc.message} (trace: {trace_id})")


if __name__ == "__main__":  # pragma: no cover
    main()
