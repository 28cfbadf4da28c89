# -*- coding: utf-8 -*-
"""
Prompt Playlist - Main Application
Generates a catalog playlist from a free-text prompt using an LLM curator
"""
import argparse
import json
import logging
import os
import sys
from typing import Optional

from prompt_playlist.catalog import open_catalog
from prompt_playlist.config_loader import Config
from prompt_playlist.errors import PipelineError
from prompt_playlist.intent.activity import ActivityTable
from prompt_playlist.intent.validator import validate_prompt
from prompt_playlist.logging_utils import add_logging_args, configure_logging, resolve_log_level
from prompt_playlist.pipeline import PlaylistPipeline
from prompt_playlist.selection.openai_client import OpenAIClient

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_PROMPT = 2


class PlaylistApp:
    """Main application orchestrator"""

    def __init__(self, config_path: str = "config.yaml", catalog_override: Optional[str] = None):
        self.config = Config(config_path)

        if self.config.activity_table_path:
            self.activity_table = ActivityTable.from_yaml(self.config.activity_table_path)
        else:
            self.activity_table = ActivityTable.load_default()

        catalog_path = catalog_override or self.config.catalog_path
        backend = self.config.catalog_backend if not catalog_override else (
            'sqlite' if catalog_override.lower().endswith(('.db', '.sqlite', '.sqlite3')) else 'json'
        )
        self.catalog = open_catalog(catalog_path, backend=backend, table=self.config.catalog_table)

        pipeline_config = self.config.pipeline_config()
        self.openai = OpenAIClient(
            api_key=self.config.openai_api_key,
            model=pipeline_config.llm.model,
            timeout=pipeline_config.llm.timeout_seconds,
            temperature=pipeline_config.llm.temperature,
        )
        self.pipeline = PlaylistPipeline(
            catalog_store=self.catalog,
            completion_client=self.openai,
            activity_table=self.activity_table,
            config=pipeline_config,
        )
        logger.debug(f"Initialized {self.config!r} (catalog={catalog_path}, backend={backend})")

    def run(self, prompt: str, is_edit: bool = False, track_count: Optional[int] = None) -> int:
        """Generate a playlist and print it as JSON"""
        try:
            result = self.pipeline.generate_playlist(prompt, is_edit=is_edit, explicit_track_count=track_count)
        except PipelineError as e:
            logger.error(f"Playlist generation failed: {e.reason}")
            print(f"\nError: {e.reason}\n", file=sys.stderr)
            return EXIT_FAILURE

        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        if result.shortfall:
            print(
                f"Note: {len(result.tracks)} of {result.request.track_count} requested tracks were found in the catalog",
                file=sys.stderr,
            )
        return EXIT_OK

    def dry_run(self, prompt: str, is_edit: bool = False, track_count: Optional[int] = None) -> int:
        """Show the extracted request and candidate pool without calling the LLM"""
        try:
            request, pool = self.pipeline.preview(prompt, is_edit=is_edit, explicit_track_count=track_count)
        except PipelineError as e:
            print(f"\nError: {e.reason}\n", file=sys.stderr)
            return EXIT_FAILURE

        print(json.dumps({
            "request": request.to_dict(),
            "candidatePool": {
                "size": len(pool),
                "relaxed": pool.relaxed,
                "top": [
                    {"name": c.track.name, "artist": c.track.primary_artist, "score": c.score}
                    for c in pool.candidates[:10]
                ],
            },
        }, ensure_ascii=False, indent=2))
        return EXIT_OK


def _print_validation(result) -> None:
    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)


def main(argv=None) -> int:
    """Entry point"""
    parser = argparse.ArgumentParser(
        description="Generate a playlist from the label catalog based on a free-text prompt"
    )
    parser.add_argument(
        "prompt",
        type=str,
        help='What the playlist is for (e.g., "running, 30 minutes, high energy")'
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to config.yaml (default: config.yaml)"
    )
    parser.add_argument(
        "--catalog",
        type=str,
        help="Override catalog.path from the config (JSON file or SQLite database)"
    )
    parser.add_argument(
        "--edit",
        action="store_true",
        help="Editing an existing playlist: use --track-count (default 10) instead of the prompt duration"
    )
    parser.add_argument(
        "--track-count",
        type=int,
        help="Explicit number of tracks to request"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Reject prompts without a duration and an activity or genre (exit code 2)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Extract and rank candidates only; do not contact the LLM"
    )
    add_logging_args(parser)
    args = parser.parse_args(argv)

    configure_logging(
        level=resolve_log_level(args),
        log_file=args.log_file,
        show_run_id=args.show_run_id,
    )

    if args.validate:
        table = ActivityTable.load_default()
        if os.path.exists(args.config):
            table_path = Config(args.config).activity_table_path
            if table_path:
                table = ActivityTable.from_yaml(table_path)
        validation = validate_prompt(args.prompt, table)
        _print_validation(validation)
        if not validation.is_valid:
            return EXIT_INVALID_PROMPT

    if not os.path.exists(args.config):
        print(f"Error: {args.config} not found", file=sys.stderr)
        print("\nPlease create it from config.example.yaml.\n", file=sys.stderr)
        return EXIT_FAILURE

    try:
        app = PlaylistApp(args.config, catalog_override=args.catalog)
        if args.dry_run:
            return app.dry_run(args.prompt, is_edit=args.edit, track_count=args.track_count)
        return app.run(args.prompt, is_edit=args.edit, track_count=args.track_count)
    except (ValueError, FileNotFoundError) as e:
        print(f"\nConfiguration Error: {e}", file=sys.stderr)
        print("\nPlease check your config.yaml file.\n", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
