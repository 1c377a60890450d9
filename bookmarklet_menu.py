#!/usr/bin/env python3
"""
Bookmarklet Menu Tool
Builds a condensed menu of the bookmarklets (javascript: bookmarks) found in a browser bookmark file.
"""

import argparse
import logging
import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from bookmark_sources import FORMATS, BookmarkSourceError, get_chrome_bookmarks_path, load_raw_tree
from bookmarklet_tree import Node, count_bookmarklets, reduce
from menu_config import MenuConfig
from menu_host import TextMenuHost, build_menu, instructions_to_json
from menu_projector import project
from menu_updater import MenuUpdater


def setup_logger(verbose: bool = False, log_dir: Optional[str] = None) -> logging.Logger:
    """Set up console logging, plus a log file when a directory is given"""
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Clear any existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_filename = f"{log_dir}/{timestamp}.log"

        # File handler for detailed logs
        file_handler = logging.FileHandler(log_filename, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(file_handler)
        print(f"📝 Detailed logging enabled: {log_filename}")

    return logger


def write_output(text: str, output_file: Optional[str]):
    if not output_file:
        print(text)
        return
    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(text + "\n")
    print(f"💾 Menu saved to: {output_file}")


def watch(bookmark_file: Path, updater: MenuUpdater, interval: float):
    """Poll the bookmark file and rebuild the menu when it changes"""
    last_mtime = bookmark_file.stat().st_mtime
    print(f"👀 Watching {bookmark_file} for changes (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(interval)
            try:
                mtime = bookmark_file.stat().st_mtime
            except FileNotFoundError:
                # Browsers replace the file when saving it
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                updater.request_recompute()
    except KeyboardInterrupt:
        updater.cancel()
        print("\n👋 Stopped watching")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Bookmarklet Menu Tool")
    parser.add_argument("bookmark_file", nargs="?", help="Path to browser bookmark file (default: Chrome bookmarks of --profile)")
    parser.add_argument("--format", choices=FORMATS, default="auto", help="Bookmark file format")
    parser.add_argument("--profile", default="Default", help="Chrome profile used when no bookmark file is given")
    parser.add_argument("--flat", action="store_true", default=None, help="Show all bookmarklets at one level, without folders")
    parser.add_argument("--json", action="store_true", help="Output menu create instructions as JSON")
    parser.add_argument("--output", "-o", help="Output file for the menu")
    parser.add_argument("--watch", action="store_true", help="Rebuild the menu whenever the bookmark file changes")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between checks of the bookmark file in --watch mode")
    parser.add_argument("--delay", type=float, help="Seconds to wait after a change before rebuilding the menu")
    parser.add_argument("--log-dir", help="Write a detailed log file to this directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    args = parser.parse_args(argv)
    setup_logger(args.verbose, args.log_dir)

    try:
        config = MenuConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if args.flat:
        config.flat_menu = True
    if args.delay is not None:
        config.update_delay = args.delay

    try:
        bookmark_file = Path(args.bookmark_file) if args.bookmark_file else get_chrome_bookmarks_path(args.profile)
        if not bookmark_file.exists():
            print(f"Error: Bookmark file '{bookmark_file}' not found.")
            return 1

        if args.watch:
            host = TextMenuHost()

            def print_menu(tree: Optional[Node]):
                if args.json:
                    print(instructions_to_json(project(tree, config.flat_menu, empty_title=config.empty_title)))
                    return
                print(f"\n🔄 Menu rebuilt at {datetime.now().strftime('%H:%M:%S')} ({count_bookmarklets(tree)} bookmarklets)")
                print(host.render())

            updater = MenuUpdater(lambda: load_raw_tree(bookmark_file, args.format), host, config, print_menu)
            updater.show_loading()
            updater.update()
            watch(bookmark_file, updater, args.interval)
            return 0

        # Keep stdout clean when it carries the JSON document
        quiet = args.json and not args.output
        if not quiet:
            print(f"📚 Loading bookmarks from: {bookmark_file}")
        tree = reduce(load_raw_tree(bookmark_file, args.format), config.untitled_title)
    except BookmarkSourceError as e:
        print(f"Error: {e}")
        return 1

    host = TextMenuHost()
    instructions = build_menu(host, tree, config)
    if not quiet:
        print(f"🔖 Found {count_bookmarklets(tree)} bookmarklets")

    if args.json:
        write_output(instructions_to_json(instructions), args.output)
    else:
        write_output(host.render(), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
