#!/usr/bin/env python3
"""
Veilpix Command Line Interface

Hide files or a message inside an image, and get them back.

Usage:
    veilpix hide -i IMAGE -o OUT.png (-d FILE [-d FILE ...] | -m TEXT)
    veilpix unveil -i IMAGE -o DIR
    veilpix unveil-raw -i IMAGE -o FILE
    veilpix capacity -i IMAGE [--name NAME] [--json]
    veilpix --version
    veilpix --help
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import StegoConfig
from .errors import StegoError
from .manager import SteganoManager


class VeilpixCLI:
    """Main CLI application for veilpix."""

    def __init__(self, config: Optional[StegoConfig] = None):
        self.config = config
        self.manager: Optional[SteganoManager] = None

    def run(self, args: List[str]) -> int:
        """Run the CLI with given arguments."""
        parser = self.create_parser()
        parsed = parser.parse_args(args)

        if not hasattr(parsed, 'func'):
            parser.print_help()
            return 0

        try:
            config = self.config or self.load_config(parsed.config)
            self.configure_logging(config, parsed.verbose, parsed.quiet)
            self.manager = SteganoManager(config)
            return parsed.func(parsed)
        except (StegoError, OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    @staticmethod
    def load_config(path: Optional[str]) -> StegoConfig:
        if path:
            return StegoConfig.from_file(path)
        return StegoConfig.default()

    @staticmethod
    def configure_logging(config: StegoConfig, verbose: int, quiet: bool):
        level = config.logging_level
        if quiet:
            level = logging.ERROR
        elif verbose >= 2:
            level = logging.DEBUG
        elif verbose == 1:
            level = min(level, logging.INFO)
        logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
        logging.getLogger('veilpix').setLevel(level)

    def create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="veilpix",
            description="Hide files or messages in the pixels of an image",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    veilpix hide -i cover.jpg -o carrier.png -d report.pdf -d notes.txt
    veilpix hide -i cover.png -o carrier.png -m "meet at noon"
    veilpix unveil -i carrier.png -o restored/
    veilpix unveil-raw -i carrier.png -o container.bin
    veilpix capacity -i cover.png
            """
        )

        parser.add_argument(
            '--version',
            action='version',
            version=f'veilpix {__version__}'
        )
        parser.add_argument('--verbose', '-v', action='count', default=0,
                            help='More output (repeat for debug)')
        parser.add_argument('--quiet', '-q', action='store_true',
                            help='Only report errors')
        parser.add_argument('--config', '-c', help='JSON configuration file')

        subparsers = parser.add_subparsers(title='commands', dest='command')

        self.add_hide_command(subparsers)
        self.add_unveil_commands(subparsers)
        self.add_capacity_command(subparsers)

        return parser

    def add_hide_command(self, subparsers):
        """Add hide command to parser."""
        cmd = subparsers.add_parser('hide', help='Hide files or a message in an image')
        cmd.add_argument('--input', '-i', required=True, help='Carrier image (any format)')
        cmd.add_argument('--output', '-o', required=True, help='Output PNG image')
        what = cmd.add_mutually_exclusive_group(required=True)
        what.add_argument('--data', '-d', action='append', metavar='FILE',
                          help='File to hide (repeatable)')
        what.add_argument('--message', '-m', help='Text message to hide')
        cmd.set_defaults(func=self.handle_hide)

    def add_unveil_commands(self, subparsers):
        """Add unveil and unveil-raw commands."""
        unveil_cmd = subparsers.add_parser('unveil', help='Restore hidden files into a directory')
        unveil_cmd.add_argument('--input', '-i', required=True, help='Carrier PNG image')
        unveil_cmd.add_argument('--output', '-o', required=True, help='Output directory')
        unveil_cmd.set_defaults(func=self.handle_unveil)

        raw_cmd = subparsers.add_parser('unveil-raw', help='Dump the raw hidden container')
        raw_cmd.add_argument('--input', '-i', required=True, help='Carrier PNG image')
        raw_cmd.add_argument('--output', '-o', required=True, help='Output file')
        raw_cmd.set_defaults(func=self.handle_unveil_raw)

    def add_capacity_command(self, subparsers):
        """Add capacity command."""
        cmd = subparsers.add_parser('capacity', help='Show how much an image can hold')
        cmd.add_argument('--input', '-i', required=True, help='Carrier image')
        cmd.add_argument('--name', default='file.bin',
                         help='File name used for the max file size figure (default: file.bin)')
        cmd.add_argument('--json', action='store_true', help='Output as JSON')
        cmd.set_defaults(func=self.handle_capacity)

    # Command handlers

    def handle_hide(self, args) -> int:
        """Handle hide command."""
        result = self.manager.hide(args.input, args.output, files=args.data, message=args.message)
        print(f"Hid {result.entries} entries ({result.container_bytes} bytes, "
              f"{result.utilization:.1%} of capacity) in {result.output_path}")
        return 0

    def handle_unveil(self, args) -> int:
        """Handle unveil command."""
        result = self.manager.unveil(args.input, args.output)
        for path in result.written:
            print(path)
        return 0

    def handle_unveil_raw(self, args) -> int:
        """Handle unveil-raw command."""
        result = self.manager.unveil_raw(args.input, args.output)
        print(f"Wrote {result.container_bytes} bytes to {args.output}")
        return 0

    def handle_capacity(self, args) -> int:
        """Handle capacity command."""
        report = self.manager.capacity(args.input)
        if args.json:
            print(json.dumps(report.to_dict(file_name=args.name), indent=2))
        else:
            print(f"Image:       {report.width}x{report.height}, {report.channels} channel(s)")
            print(f"Capacity:    {report.capacity_bits} bits ({report.capacity_bytes} bytes)")
            print(f"Max message: {report.max_message_bytes} bytes")
            print(f"Max file:    {report.max_file_bytes(args.name)} bytes (stored as {args.name})")
        return 0


def main():
    """Main entry point."""
    cli = VeilpixCLI()
    sys.exit(cli.run(sys.argv[1:]))


if __name__ == "__main__":
    main()
