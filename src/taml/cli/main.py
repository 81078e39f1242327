#!/usr/bin/env python3
"""
TAML CLI - Command Line Interface
---------------------------------
Routes subcommands onto the engine, the converter and the pipeline:

1. validate / info        (read-only inspection of one file)
2. convert / import       (TAML <-> JSON, YAML, XML)
3. fmt / scan             (canonical formatting and batch audits)

Author: TAML Core Team
Date: 2026-10-18
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn

from taml.adapters.converter import FormatConverter, SUPPORTED_INPUT, SUPPORTED_OUTPUT
from taml.cli.formatter import TamlFormatter
from taml.core.config import EngineConfig, ParseOptions, SerializeOptions
from taml.core.engine import TamlEngine
from taml.core.errors import TamlError, TamlParseError
from taml.parsing.pipeline import TamlPipeline

__version__ = "0.1.0"

_EXTENSION_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml", ".xml": "xml"}


class TamlCLI:
    """
    CLI wrapper that translates user commands into engine actions.
    Console and output streams are injected so nothing here is global.
    """

    def __init__(self, console: Optional[Console] = None, stdout: Optional[TextIO] = None):
        self.console = console or Console()
        self.stdout = stdout or sys.stdout
        self.formatter = TamlFormatter(self.console)
        self.parser = argparse.ArgumentParser(
            prog="taml",
            description="TAML - Tab Accessible Markup Language toolkit",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-v", "--version", action="version", version=f"taml v{__version__}")
        self.parser.add_argument("--log-level", default="WARNING",
                                 choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity")
        self.parser.add_argument("--raw", action="store_true",
                                 help="Keep every value as a string (no boolean/number coercion)")
        self.parser.add_argument("--lenient", action="store_true",
                                 help="Skip invalid lines instead of failing")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        validate_parser = subparsers.add_parser("validate", help="Validate a TAML document")
        validate_parser.add_argument("path", help="TAML file to validate")
        validate_parser.add_argument("--verbose", action="store_true", help="Show the offending source lines")

        convert_parser = subparsers.add_parser("convert", help="Convert TAML to JSON or YAML")
        convert_parser.add_argument("path", help="TAML file to convert")
        convert_parser.add_argument("-f", "--format", default="yaml", choices=SUPPORTED_OUTPUT)
        convert_parser.add_argument("-o", "--output", help="Output file (defaults to stdout)")

        import_parser = subparsers.add_parser("import", help="Convert JSON, YAML or XML to TAML")
        import_parser.add_argument("path", help="File to import")
        import_parser.add_argument("-f", "--format", choices=SUPPORTED_INPUT,
                                   help="Input format (default: from the file extension)")
        import_parser.add_argument("-o", "--output", help="Output file (defaults to stdout)")
        import_parser.add_argument("--flatten-lists", action="store_true",
                                   help="Inline objects and lists found inside lists (lossy)")

        info_parser = subparsers.add_parser("info", help="Display information about a TAML file")
        info_parser.add_argument("path", help="TAML file to analyze")

        fmt_parser = subparsers.add_parser("fmt", help="Rewrite TAML files in canonical form")
        fmt_parser.add_argument("path", help="TAML file or directory")
        fmt_parser.add_argument("--dry-run", action="store_true", help="Preview results without writing")
        fmt_parser.add_argument("--diff", action="store_true", help="Show the proposed changes")
        fmt_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
        fmt_parser.add_argument("--no-backup", action="store_true", help="Do not keep .backup copies")
        fmt_parser.add_argument("--ext", default=".taml", help="File extension filter (default: .taml)")

        scan_parser = subparsers.add_parser("scan", help="Validate every TAML file in a directory")
        scan_parser.add_argument("path", help="Directory to scan")
        scan_parser.add_argument("--ext", default=".taml", help="File extension filter (default: .taml)")
        scan_parser.add_argument("--max-depth", type=int, default=10, help="Maximum directory depth")

    # ---------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------

    def _parse_options(self, args: argparse.Namespace) -> ParseOptions:
        return ParseOptions(strict=not args.lenient, coerce_types=not args.raw)

    def _read_input(self, path: str) -> Optional[str]:
        file_path = Path(path)
        if not file_path.is_file():
            self.console.print(f"[bold red]Error:[/bold red] Input file '{path}' not found.")
            return None
        try:
            return file_path.read_text(encoding='utf-8-sig')
        except (OSError, UnicodeDecodeError) as e:
            self.console.print(f"[bold red]Error:[/bold red] Cannot read '{path}': {e}")
            return None

    def _emit(self, text: str, output: Optional[str], label: str):
        """Writes results to a file or straight to stdout (never via rich: tabs matter)."""
        if output:
            Path(output).write_text(text if text.endswith("\n") else text + "\n", encoding='utf-8')
            self.console.print(f"[green]Successfully converted to {label} -> '{output}'[/green]")
        else:
            self.stdout.write(text if text.endswith("\n") else text + "\n")

    # ---------------------------------------------------------------
    # Commands
    # ---------------------------------------------------------------

    def cmd_validate(self, args: argparse.Namespace) -> int:
        text = self._read_input(args.path)
        if text is None:
            return 1
        result = TamlPipeline(self._parse_options(args)).validate(text)
        self.formatter.print_validation(Path(args.path).name, result, text, verbose=args.verbose)
        return 0 if result.is_valid else 1

    def cmd_convert(self, args: argparse.Namespace) -> int:
        text = self._read_input(args.path)
        if text is None:
            return 1
        try:
            result = FormatConverter(self._parse_options(args)).taml_to(text, args.format)
        except TamlParseError as e:
            self.console.print(f"[bold red]TAML Parse Error:[/bold red] {e}")
            return 1
        except TamlError as e:
            self.console.print(f"[bold red]Error:[/bold red] {e}")
            return 1
        self._emit(result, args.output, args.format.upper())
        return 0

    def cmd_import(self, args: argparse.Namespace) -> int:
        fmt = args.format or _EXTENSION_FORMATS.get(Path(args.path).suffix.lower())
        if fmt is None:
            self.console.print("[bold red]Error:[/bold red] Cannot guess the input format; pass --format.")
            return 1
        text = self._read_input(args.path)
        if text is None:
            return 1
        converter = FormatConverter(
            self._parse_options(args),
            SerializeOptions(flatten_nested=args.flatten_lists),
        )
        try:
            result = converter.to_taml(text, fmt)
        except TamlError as e:
            self.console.print(f"[bold red]Error:[/bold red] {e}")
            return 1
        self._emit(result, args.output, "TAML")
        return 0

    def cmd_info(self, args: argparse.Namespace) -> int:
        text = self._read_input(args.path)
        if text is None:
            return 1
        pipeline = TamlPipeline(self._parse_options(args))
        lines = text.split("\n")
        non_empty = sum(1 for line in lines if line.strip())
        comments = pipeline.lexer.count_comments(text)
        validation = pipeline.validate(text)

        root_keys = None
        if validation.is_valid:
            root_keys = list(pipeline.parse(text).keys())

        self.formatter.print_info({
            "name": Path(args.path).name,
            "size": Path(args.path).stat().st_size,
            "lines": len(lines),
            "content_lines": non_empty - comments,
            "comment_lines": comments,
            "valid": validation.is_valid,
            "errors": len(validation.errors),
            "root_keys": root_keys,
        })
        return 0

    def _confirm_action(self, target_count: int, args: argparse.Namespace) -> bool:
        """Safety gate: ensures the user wants to proceed with writes."""
        if args.dry_run or args.yes:
            return True
        if target_count == 1:
            choice = self.console.input("\n[bold yellow]Apply formatting to this file? (y/N): [/bold yellow]")
            return choice.lower() == 'y'
        user_input = self.console.input(
            f"[bold yellow]Type 'CONFIRM' to format {target_count} files: [/bold yellow]")
        return user_input == "CONFIRM"

    def _run_engine(self, args: argparse.Namespace, fix: bool) -> int:
        input_path = Path(args.path).resolve()
        if not input_path.exists():
            self.console.print(f"[bold red]Error:[/bold red] Path '{args.path}' not found.")
            return 1

        workspace = input_path if input_path.is_dir() else input_path.parent
        config = EngineConfig(
            extension=args.ext,
            max_depth=getattr(args, "max_depth", 10),
            backup=not getattr(args, "no_backup", False),
            parse=self._parse_options(args),
            serialize=SerializeOptions(trailing_newline=True),
        )
        engine = TamlEngine(str(workspace), config)
        dry_run = getattr(args, "dry_run", True) or not fix

        if input_path.is_file():
            targets = [input_path.name]
        else:
            targets = None

        if fix:
            count = 1 if targets else len(list(workspace.rglob(f"*{args.ext}")))
            if not self._confirm_action(count, args):
                self.console.print("[bold red]Operation cancelled by user.[/bold red]")
                return 1

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("Processing TAML files...", total=None)

            def advance(done: int, total: int):
                progress.update(task_id, completed=done, total=total)

            if targets:
                reports = [engine.audit_file(targets[0], fix=fix, dry_run=dry_run)]
            else:
                reports = engine.scan_directory(fix=fix, dry_run=dry_run, progress_callback=advance)

        if getattr(args, "diff", False):
            for report in reports:
                if report.get("formatted_content"):
                    self.formatter.display_diff(
                        report["original_content"], report["formatted_content"], report["file_path"])
                    if report.get("comments_dropped"):
                        self.console.print(
                            f"[yellow]⚠ {report['comments_dropped']} comment line(s) are not kept "
                            f"by canonical formatting.[/yellow]")

        self.formatter.print_final_table(reports, engine.generate_summary(reports))
        return 0 if all(r.get("success") for r in reports) else 1

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point. Returns the process exit code."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(level=getattr(logging, args.log_level))

        if args.command is None:
            self.formatter.print_header("Tab Accessible Markup Language", __version__)
            self.parser.print_help(self.stdout)
            return 0

        if args.command in ("fmt", "scan"):
            subtitle = "Canonical Formatter" if args.command == "fmt" else "Validation Scan"
            self.formatter.print_header(subtitle, __version__)

        handlers = {
            "validate": self.cmd_validate,
            "convert": self.cmd_convert,
            "import": self.cmd_import,
            "info": self.cmd_info,
            "fmt": lambda a: self._run_engine(a, fix=True),
            "scan": lambda a: self._run_engine(a, fix=False),
        }
        return handlers[args.command](args)


def main():
    """Application entry point with interrupt handling."""
    cli = TamlCLI()
    try:
        sys.exit(cli.run())
    except KeyboardInterrupt:
        cli.console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
