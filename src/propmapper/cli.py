"""Command-line interface for PropMapper."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="PropMapper - Map CSV columns onto a target property schema"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Suggest command
    suggest_parser = subparsers.add_parser(
        "suggest", help="Suggest target properties for the columns of a CSV file"
    )
    suggest_parser.add_argument("source", help="Source CSV file")
    suggest_parser.add_argument("--knowledge", "-k", help="Knowledge-base CSV file")
    suggest_parser.add_argument(
        "--mapping-out", help="Write the resulting mapping as JSON to this file"
    )
    suggest_parser.add_argument(
        "--triplets-out", help="Write the suggestion feedback triplets to this file"
    )

    # Export command
    export_parser = subparsers.add_parser(
        "export", help="Build the narrow and long tables from a saved mapping"
    )
    export_parser.add_argument("source", help="Source CSV file")
    export_parser.add_argument(
        "--mapping", "-m", required=True, help="Mapping JSON written by 'suggest'"
    )
    export_parser.add_argument(
        "--out-dir", default=".", help="Directory for the exported tables (default: .)"
    )
    export_parser.add_argument(
        "--upload", action="store_true", help="Forward both tables to the loader service"
    )

    args = parser.parse_args()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "suggest":
        sys.exit(
            asyncio.run(
                run_suggest(args.source, args.knowledge, args.mapping_out, args.triplets_out)
            )
        )
    elif args.command == "export":
        sys.exit(asyncio.run(run_export(args.source, args.mapping, args.out_dir, args.upload)))
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "propmapper.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8-sig")


def _print_mapping(session):
    width = max((len(row.source_header) for row in session.resolver.rows), default=0)
    for row in session.resolver.rows:
        target = row.selected_target or "-"
        marker = " (duplicate)" if row.is_duplicate else ""
        print(f"  {row.source_header.ljust(width)}  ->  {target}{marker}")
    message = session.resolver.duplicate_message()
    if message:
        print(f"\nWarning: {message}")


async def run_suggest(
    source: str,
    knowledge: Optional[str] = None,
    mapping_out: Optional[str] = None,
    triplets_out: Optional[str] = None,
) -> int:
    """Load a source file, run suggestions and print the mapping."""
    from .mapping import NoSourceLoadedError
    from .schema import SchemaUnavailableError
    from .session import MappingSession
    from .suggest import ProviderUnavailableError, SuggestionProviderError
    from .tabular import InputFormatError

    session = MappingSession()
    try:
        try:
            await session.load_schema()
            session.load_source(_read_text(source))
            if knowledge:
                entries = session.load_knowledge_base(_read_text(knowledge))
                print(f"Loaded {entries} knowledge-base entries")
        except SchemaUnavailableError as e:
            print(f"Schema unavailable: {e}")
            return 1
        except InputFormatError as e:
            print(f"Parse error: {e}")
            return 1
        except OSError as e:
            print(f"Error: {e}")
            return 1

        exit_code = 0
        try:
            report = await session.suggest()
            print(
                f"Assigned {len(report.assignments)} columns, "
                f"{len(report.unresolved)} left unresolved"
            )
        except ProviderUnavailableError as e:
            print(f"Provider unavailable: {e}")
            exit_code = 1
        except SuggestionProviderError as e:
            # Knowledge-phase assignments are kept
            print(f"Suggestion error: {e}")
            exit_code = 1
        except NoSourceLoadedError as e:
            print(f"No source loaded: {e}")
            return 1

        print()
        _print_mapping(session)

        if mapping_out:
            Path(mapping_out).write_text(
                json.dumps(session.resolver.selections(), indent=2), encoding="utf-8"
            )
            print(f"\nMapping written to {mapping_out}")
        if triplets_out:
            Path(triplets_out).write_text(session.feedback_triplet_table().to_csv(), encoding="utf-8")
            print(f"Feedback triplets written to {triplets_out}")
        return exit_code
    finally:
        await session.close()


async def run_export(source: str, mapping: str, out_dir: str = ".", upload: bool = False) -> int:
    """Apply a saved mapping to a source file and write both export tables."""
    from .export import NothingToExportError
    from .schema import SchemaUnavailableError
    from .session import MappingSession
    from .tabular import InputFormatError

    session = MappingSession()
    try:
        try:
            await session.load_schema()
            session.load_source(_read_text(source))
            selections = json.loads(_read_text(mapping))
        except (SchemaUnavailableError, InputFormatError, OSError) as e:
            print(f"Error: {e}")
            return 1
        except json.JSONDecodeError as e:
            print(f"Error: mapping file is not valid JSON: {e}")
            return 1

        if not isinstance(selections, dict):
            print("Error: mapping file must contain a JSON object")
            return 1
        session.restore_selections(selections)

        try:
            outcome = await session.generate_export(upload=upload)
        except NothingToExportError as e:
            print(f"Error: {e}")
            return 1

        directory = Path(out_dir)
        directory.mkdir(parents=True, exist_ok=True)
        for table in outcome.bundle.tables():
            path = directory / table.filename
            path.write_text(table.to_csv(), encoding="utf-8")
            print(f"Wrote {path} ({len(table.rows)} rows)")

        for result in outcome.uploads:
            status = "uploaded" if result.success else f"upload failed: {result.reason}"
            print(f"  {result.filename}: {status}")
        return 0 if outcome.success else 1
    finally:
        await session.close()


if __name__ == "__main__":
    main()
