#!/usr/bin/env python3
"""
ZipUndup CLI. Command line interface for duplicate and contained ZIP archive removal.
All operations are safe: duplicates go to the system trash, contained archives are
moved into a ".disposed" folder beside them, nothing is erased permanently.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import signal
import sys
import os
import time
from pathlib import Path
from typing import List, NoReturn, Optional
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from zipundup.core.models import Notice, NoticeLevel, RunOutcome, UnduplicationParams, UnduplicationReport
from zipundup.commands import UnduplicationCommand
from zipundup.utils.convert_utils import ConvertUtils
from zipundup.aliases import EPILOG_TEXT, PATHS_HELP_TEXT, STRICT_HELP_TEXT


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self._stop_requested: bool = False
        self._progress_shown: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        sys.stdout.reconfigure(encoding='utf-8')
        sys.stderr.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="zipundup",
            description="ZipUndup: removes duplicate and contained ZIP archives",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "paths",
            nargs="+",
            type=str,
            metavar="PATH",
            help=PATHS_HELP_TEXT
        )

        # Comparison options
        parser.add_argument(
            "--strict",
            action="store_true",
            help=STRICT_HELP_TEXT
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress informational output (errors are still printed)"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress, detailed statistics and debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.quiet and args.verbose:
            self.error_exit("--quiet and --verbose cannot be used together")

        for item in args.paths:
            if not item.strip():
                self.error_exit("Path cannot be empty")
            if not Path(item).exists():
                self.error_exit(f"Path not found: {item}")

    def create_params(self, args: argparse.Namespace) -> UnduplicationParams:
        """Create UnduplicationParams from CLI arguments."""
        try:
            return UnduplicationParams(paths=list(args.paths), strict=args.strict)
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, value: float, context: str) -> None:
        """CLI progress callback - shows a single refreshed line on stderr."""
        if not self.verbose:
            return

        line = f"{ConvertUtils.progress_to_percent(value)} {context}"
        sys.stderr.write(f"\r\033[K{line}")
        sys.stderr.flush()
        self._progress_shown = True

    def notice_listener(self, notice: Notice) -> None:
        """Prints notices as soon as the run reports them."""
        self._end_progress_line()
        if notice.level == NoticeLevel.ERROR:
            print(f"❌ {notice.message}", file=sys.stderr)
        elif not self.quiet:
            print(notice.message)

    def stopped_flag(self) -> bool:
        """Polled by the run before each archive and each archive pair."""
        return self._stop_requested

    def handle_interrupt(self, signum, frame) -> None:
        """First Ctrl+C asks the run to stop; a second one aborts immediately."""
        if self._stop_requested:
            raise KeyboardInterrupt
        self._stop_requested = True
        self._end_progress_line()
        print("\n⚠️  Stopping... (press Ctrl+C again to abort)", file=sys.stderr)

    def run_unduplication(self, params: UnduplicationParams) -> UnduplicationReport:
        """Execute unduplication workflow."""
        command = UnduplicationCommand()
        if self.verbose:
            mode_display = "strict" if params.strict else "normal"
            print(f"Searching ZIP archives (mode: {mode_display})...")

        previous_handler = signal.signal(signal.SIGINT, self.handle_interrupt)
        try:
            report = command.execute(
                params,
                progress_callback=self.progress_callback if self.verbose else None,
                stopped_flag=self.stopped_flag,
                notice_listener=self.notice_listener
            )
        finally:
            signal.signal(signal.SIGINT, previous_handler)
            self._end_progress_line()

        if self.verbose:
            directories = command.get_directories()
            print(f"\nCompared {len(directories)} folder(s) holding two or more archives")
            print(report.print_summary())

        return report

    def output_results(self, report: UnduplicationReport) -> None:
        """Short result summary for the default (non-verbose) output."""
        if self.quiet or self.verbose:
            return

        trashed = report.trashed
        relocated = report.relocated
        if not trashed and not relocated:
            print("No duplicate or contained archives found.")
            return

        print(
            f"\n{len(trashed)} duplicate(s) moved to trash "
            f"({ConvertUtils.bytes_to_human(report.reclaimed_bytes)}), "
            f"{len(relocated)} contained archive(s) moved aside"
        )

    def _end_progress_line(self) -> None:
        if self._progress_shown:
            sys.stderr.write("\n")
            sys.stderr.flush()
            self._progress_shown = False

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        self.validate_args(args)
        params = self.create_params(args)

        report = self.run_unduplication(params)
        self.output_results(report)

        if report.outcome == RunOutcome.CANCELLED:
            print("Cancelled.")
        elif report.outcome == RunOutcome.FAILED:
            print("❌ Failed.", file=sys.stderr)
        else:
            print("Finished.")

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")

        sys.exit(report.outcome.exit_code)


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
