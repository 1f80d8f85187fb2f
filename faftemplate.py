#!/usr/bin/env python3
import argparse
import logging
import os
import sys
from typing import List

from faftemplate_lib import (
    ConsolePrompter,
    ScaffoldCancelled,
    ScaffoldError,
    discover_template_roots,
    list_templates,
    load_config,
    parse_params,
    run_scaffold,
    visible_templates,
)

logger = logging.getLogger("faftemplate")


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _list(root: str, extra_paths: List[str]) -> int:
    config = load_config(root)
    roots = discover_template_roots(root, extra_paths + config.template_paths)
    for t in visible_templates(list_templates(roots)):
        print(t.name)
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Copy a template folder into a destination, replacing __placeholder__ tokens "
            "in names and contents with case-matched values."
        )
    )
    parser.add_argument(
        "-o",
        "--out",
        default=os.getcwd(),
        help="Destination directory (default: current directory)",
    )
    parser.add_argument(
        "-r",
        "--root",
        default=os.getcwd(),
        help="Project root holding .templates and .faftemplate.yaml (default: current directory)",
    )
    parser.add_argument(
        "-t",
        "--template",
        help="Template name. Skips the interactive picker.",
    )
    parser.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        help=(
            "Preset a variable value. Repeatable. Accepts key=value or key:value. "
            "Example: -p name=\"my thing\" -p owner=platform"
        ),
    )
    parser.add_argument(
        "--template-path",
        action="append",
        default=[],
        help="Extra template root searched before configured ones. Repeatable.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the selectable template names and exit",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only warnings and errors")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    if args.list:
        try:
            return _list(args.root, args.template_path)
        except ScaffoldError as e:
            logger.error("Listing failed: %s", e)
            return 1

    try:
        params = parse_params(args.param)
    except ScaffoldError as e:
        logger.error("Error parsing parameters: %s", e)
        return 2

    try:
        result = run_scaffold(
            args.out,
            args.root,
            ConsolePrompter(),
            template_name=args.template,
            params=params,
            template_paths=args.template_path,
        )
    except ScaffoldCancelled:
        return 1
    except ScaffoldError as e:
        logger.error("Generation failed: %s", e)
        return 1
    except Exception as e:
        logger.error("Error: %s", e)
        return 1

    print(f"Template \"{result.template}\" copied to {result.destination}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
