#!/usr/bin/env python3
"""
dupfinder CLI — command line interface for duplicate file detection and removal.
Drives the same ScanOrchestrator a GUI would, with console-based interaction.
Removal moves files to the system trash, never permanent erase.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import os
import sys
import time
from pathlib import Path
from typing import List, NoReturn, Optional
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    import send2trash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("Send2Trash")

try:
    import xxhash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("xxhash")

try:
    import imagehash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("ImageHash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    print("\nOr install the package with its dependencies:", file=sys.stderr)
    print("   pip install dupfinder", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from dupfinder.aliases import (
    ALGORITHM_CHOICES, ALGORITHM_HELP_TEXT, EPILOG_TEXT, KEEP_ALIASES, KEEP_CHOICES, KEEP_HELP_TEXT)
from dupfinder.core.hasher import HASH_ALGORITHMS
from dupfinder.core.models import DuplicateGroup, KeepStrategy, ScanConfiguration, ScanSession, ScanState
from dupfinder.orchestrator import ScanOrchestrator
from dupfinder.utils.convert_utils import ConvertUtils


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.orchestrator: Optional[ScanOrchestrator] = None

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupfinder",
            description="dupfinder — duplicate file and similar image finder with safe removal",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "--input", "-i",
            required=True,
            nargs="+",
            type=str,
            help="One or more directories to scan"
        )

        # Filtering options
        parser.add_argument(
            "--min-size", "-m",
            default="0",
            type=str,
            metavar='',
            help="Minimum file size (e.g., 500KB, 1MB). Default: 0"
        )
        parser.add_argument(
            "--extensions", "-x",
            nargs="+",
            default=[],
            type=str,
            metavar='',
            help="Only include these extensions (space separated, e.g., jpg png)"
        )
        parser.add_argument(
            "--exclude", "-e",
            nargs="+",
            default=[],
            type=str,
            metavar='',
            help="Extra directory or file names to skip anywhere in the tree (space separated)"
        )
        parser.add_argument(
            "--include-hidden",
            action="store_true",
            help="Also scan hidden files and directories"
        )

        # Detection options
        parser.add_argument(
            "--verify",
            action="store_true",
            help="Confirm exact duplicates byte by byte after hashing"
        )
        parser.add_argument(
            "--algorithm",
            choices=ALGORITHM_CHOICES,
            default="sha256",
            type=str,
            help=ALGORITHM_HELP_TEXT
        )
        parser.add_argument(
            "--similar",
            action="store_true",
            help="Find visually similar images instead of exact duplicates"
        )
        parser.add_argument(
            "--threshold",
            type=float,
            default=None,
            help="Maximum image distance for --similar (0..1). Default: 0.15"
        )

        # Selection options
        parser.add_argument(
            "--keep",
            choices=KEEP_CHOICES,
            default="newest",
            type=str,
            help=KEEP_HELP_TEXT
        )
        parser.add_argument(
            "--prefer-folder",
            default=None,
            type=str,
            metavar='NAME',
            dest="prefer_folder",
            help="Keep the file inside a folder with this name when a group has one"
        )

        # Actions
        parser.add_argument(
            "--remove",
            action="store_true",
            help="Move every file not marked [KEEP] to trash. "
                 "Always shows preview before removal for safety."
        )
        parser.add_argument(
            "--backup-dir",
            default=None,
            type=str,
            dest="backup_dir",
            help="Copy each file here before moving it to trash"
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --remove (for automation/scripts)"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show progress and debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.force and not args.remove:
            self.error_exit("--force can only be used with --remove")

        if args.backup_dir and not args.remove:
            self.error_exit("--backup-dir can only be used with --remove")

        if args.threshold is not None:
            if not args.similar:
                self.error_exit("--threshold can only be used with --similar")
            if args.threshold < 0:
                self.error_exit("Threshold cannot be negative")

        # Prevent interactive confirmation in non-TTY environments
        if args.remove and not args.force:
            if not self.is_interactive():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        for root in args.input:
            root_path = Path(root).resolve()
            if not root_path.exists():
                self.error_exit(f"Directory not found: {root}")
            if not root_path.is_dir():
                self.error_exit(f"Path is not a directory: {root}")

        try:
            ConvertUtils.human_to_bytes(args.min_size)
        except ValueError as e:
            self.error_exit(f"Invalid size format: {e}")

        if args.keep not in KEEP_ALIASES:
            self.error_exit(
                f"Invalid keep strategy: '{args.keep}'.\n"
                f"Valid options: {', '.join(KEEP_CHOICES)}"
            )

    def create_config(self, args: argparse.Namespace) -> ScanConfiguration:
        """Create ScanConfiguration from CLI arguments."""
        try:
            return ScanConfiguration.from_human_readable(
                roots=[str(Path(root).resolve()) for root in args.input],
                min_size_str=args.min_size,
                extensions_str=",".join(args.extensions),
                extra_excluded=[name.strip() for name in args.exclude if name.strip()],
                skip_hidden=not args.include_hidden,
                verify_bytes=args.verify,
                distance_threshold=args.threshold,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    @staticmethod
    def is_interactive() -> bool:
        return sys.stdin.isatty() and sys.stdout.isatty()

    @staticmethod
    def create_orchestrator(args: argparse.Namespace) -> ScanOrchestrator:
        return ScanOrchestrator(hash_algorithm=HASH_ALGORITHMS[args.algorithm])

    def progress_listener(self, session: ScanSession) -> None:
        """CLI progress listener - shows progress in console."""
        if not self.verbose or not session.is_scanning:
            return
        sys.stderr.write(f"\r  [{session.progress * 100:5.1f}%] {session.message}")
        sys.stderr.flush()

    def run_scan(self, config: ScanConfiguration, args: argparse.Namespace) -> ScanSession:
        """Execute the scan and block until it is finished."""
        self.orchestrator.add_listener(self.progress_listener)
        if args.similar:
            self.orchestrator.start_similarity_scan(config, threshold=args.threshold)
        else:
            self.orchestrator.start_scan(config)

        try:
            session = self.orchestrator.wait()
        except KeyboardInterrupt:
            self.orchestrator.cancel()
            self.orchestrator.wait()
            raise

        if self.verbose:
            sys.stderr.write("\n")

        if session.state == ScanState.ERRORED:
            self.error_exit(f"Scan failed: {session.message}")
        if self.verbose:
            print(f"Scanned {session.files_scanned} files, "
                  f"reclaimable: {ConvertUtils.bytes_to_human(session.reclaimable_bytes)}")
        return session

    def apply_selection(self, args: argparse.Namespace) -> None:
        """Applies the requested keep strategy. Newest is already applied by the scan."""
        if args.prefer_folder:
            self.orchestrator.apply_strategy(KeepStrategy.PREFERRED_FOLDER, args.prefer_folder)
            return
        strategy = KEEP_ALIASES[args.keep]
        if strategy != KeepStrategy.NEWEST:
            self.orchestrator.apply_strategy(strategy)

    def output_results(self, groups: List[DuplicateGroup], similar: bool = False) -> None:
        """Output groups as plain text with [KEEP]/[DEL] markers."""
        if self.quiet:
            return

        if not groups:
            print("No similar images found." if similar else "No duplicate groups found.")
            return

        total_files = sum(len(g.files) for g in groups)
        kind = "similar image" if similar else "duplicate"
        print(f"\nFound {len(groups)} {kind} groups ({total_files} files)")

        for idx, group in enumerate(groups, 1):
            size_str = ConvertUtils.bytes_to_human(group.size_per_file)
            print(f"\n📁 Group {idx} | Size: {size_str} | Files: {len(group.files)}")
            for file in group.files:
                marker = "[KEEP]" if file.kept else "[DEL] "
                print(f"   {marker} {file.path} [{ConvertUtils.bytes_to_human(file.size)}]")

    def execute_remove(self, session: ScanSession, args: argparse.Namespace) -> None:
        """Moves every non-kept file to trash. Always shows a summary before removal."""
        files_to_remove = self.orchestrator.files_to_remove()
        if not files_to_remove:
            if not self.quiet:
                print("No files to remove.")
            return

        space_saved = sum(f.size for f in files_to_remove)
        space_saved_str = ConvertUtils.bytes_to_human(space_saved)

        print()
        print("=" * 60)
        print(f"Summary: Keep 1 file per group ({len(session.groups)} files preserved, "
              f"{len(files_to_remove)} files to remove)")
        print(f"Total space saved: {space_saved_str}")
        if args.backup_dir:
            print(f"Backup directory: {args.backup_dir}")
        print()

        if args.force:
            print("⚠️  WARNING: --force flag skips confirmation. Proceeding with removal...")
        else:
            if not self.is_interactive():
                self.error_exit(
                    "Lost interactive terminal during operation. "
                    "Use --force to proceed in non-interactive environments."
                )
            response = input(f"Are you sure you want to move {len(files_to_remove)} files to trash? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Removal cancelled by user.")
                return

        print(f"\nMoving {len(files_to_remove)} files to trash...")
        try:
            result = self.orchestrator.remove_marked(backup_dir=args.backup_dir)
        except OSError as e:
            self.error_exit(f"Cannot create backup directory: {e}")

        if result.failed:
            print(f"\n⚠️  Partial success: {len(result.removed)}/{len(files_to_remove)} files moved to trash.")
            print(f"Failed to remove {len(result.failed)} file(s):")
            for path in result.failed[:5]:
                print(f"  • {os.path.basename(path)}")
            if len(result.failed) > 5:
                print(f"  ...and {len(result.failed) - 5} more files")
        else:
            print(f"✅ Successfully moved {len(result.removed)} files to trash.")
            print(f"Total space saved: {space_saved_str}")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

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
            logging.getLogger("dupfinder").setLevel(logging.DEBUG)

        self.validate_args(args)
        config = self.create_config(args)

        if not self.quiet:
            print(f"Scanning: {', '.join(config.roots)}")

        self.orchestrator = self.create_orchestrator(args)
        try:
            self.run_scan(config, args)
            self.apply_selection(args)
            session = self.orchestrator.session

            self.output_results(list(session.groups), similar=args.similar)
            if args.remove:
                self.execute_remove(session, args)
        finally:
            self.orchestrator.shutdown()

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


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
