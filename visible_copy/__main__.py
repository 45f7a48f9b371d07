import argparse
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from visible_copy import VisibleCopy
from visible_copy.config import PickerConfig
from visible_copy.types import CopyMode

load_dotenv()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="visible_copy",
        description="Copy the visible HTML or text of an element on a web page.",
    )
    parser.add_argument("url", help="Page to open")
    parser.add_argument(
        "--selector",
        help="CSS selector to extract directly instead of picking interactively",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in CopyMode],
        help="Copy mode (default: VISIBLE_COPY_DEFAULT_MODE or html)",
    )
    parser.add_argument("--headless", action="store_true", help="Run the browser without a window")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = PickerConfig.from_env()
    if args.mode:
        config.default_mode = CopyMode(args.mode)

    if args.headless and not args.selector:
        print("--headless requires --selector; the picker needs a visible browser.", file=sys.stderr)
        return 2

    with VisibleCopy(headless=args.headless, config=config) as browser:
        if not browser.navigate_to(args.url):
            print(f"Could not open {args.url}", file=sys.stderr)
            return 1

        if args.selector:
            content = browser.extract(args.selector)
        else:
            print("Hover an element and click to select it. Press Escape to cancel.")
            content = browser.pick()

    if content is None:
        print("Nothing copied.", file=sys.stderr)
        return 1

    print(content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
