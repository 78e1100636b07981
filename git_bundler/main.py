# -*- Mode:Python; indent-tabs-mode:nil; tab-width:4 -*-
#
# Copyright 2025 Canonical Ltd.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License version 3 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Git bundler command line tool.

This is the main entry point for the git_bundler package, invoked
when running `git-bundler` or `python -m git_bundler`. It reads the
build configuration from the environment and either displays the
planned stages (using `--dry-run`) or runs them.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import git_bundler
from git_bundler import errors
from git_bundler.config import load_config
from git_bundler.pipeline import Pipeline


def main(argv: list[str] | None = None) -> None:
    """Run the command-line interface."""
    options = _parse_arguments(argv)

    if options.version:
        print(f"git-bundler {git_bundler.__version__}")
        sys.exit()

    if options.trace:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    logging.basicConfig(level=log_level, format="%(message)s")

    try:
        _run(options)
    except OSError as err:
        msg = err.strerror or str(err)
        if err.filename:
            msg = f"{err.filename}: {msg}"
        print(f"Error: {msg}.", file=sys.stderr)
        sys.exit(1)
    except errors.ConfigurationError as err:
        print(f"Error: invalid build configuration: {err}", file=sys.stderr)
        sys.exit(2)
    except errors.BundlerError as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(3)


def _run(options: argparse.Namespace) -> None:
    config_file = Path(options.file) if options.file else None
    config = load_config(os.environ, config_file=config_file)

    pipeline = Pipeline(
        config,
        force=options.force,
        run_smoke_test=not options.skip_smoke_test,
        verbose=options.verbose,
    )

    if options.dry_run:
        print(f"Target: {pipeline.target.architecture} ({pipeline.target.host_triple})")
        for line in pipeline.plan():
            print(line)
        sys.exit()

    pipeline.run()


def _parse_arguments(argv: list[str] | None) -> argparse.Namespace:
    prog = "git-bundler"
    description = (
        "Cross-compile Git with its network dependencies and assemble a "
        "self-contained bundle. Build inputs are read from environment variables."
    )

    parser = argparse.ArgumentParser(prog=prog, description=description, add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action="help",
        default=argparse.SUPPRESS,
        help="Show this help message and exit.",
    )
    parser.add_argument(
        "-f",
        "--file",
        metavar="filename",
        default="",
        help="A YAML file with build configuration entries.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the planned stages and exit.",
    )
    parser.add_argument(
        "--skip-smoke-test",
        action="store_true",
        help="Don't clone a repository with the assembled binary.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Rebuild dependency libraries even if they are up to date.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="show build output",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable debug messages.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Display the git-bundler version and exit.",
    )

    return parser.parse_args(argv)
