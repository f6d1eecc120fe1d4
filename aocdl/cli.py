import argparse
import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Final, NoReturn, Sequence

import requests

from .config import load_configs, load_environment
from .errors import AocdlError, ConfigError, MissingSessionCookieError
from .fetch import check_output, download
from .release import resolve_defaults, wait
from .settings import Settings, merge_all
from .template import render_output

TITLE_ABOUT_MESSAGE: Final = """Advent of Code Downloader

aocdl is a command line utility that automatically downloads your Advent of Code
puzzle inputs.
"""

USAGE_MESSAGE: Final = """Usage:

	aocdl [options]

Options:

	-session-cookie 0123456789...abcdef
		Use the specified string as session cookie. The AOC_SESSION
		environment variable is used when this option is not given.

	-output input.txt
		Save the downloaded puzzle input to the specified file. The special
		markers {{.Year}} and {{.Day}} will be replaced with the selected year
		and day.

	-year 2000
	-day 24
		Download the input from the specified year or day. By default the
		current year and day is used.

	-force
		Overwrite file if it already exists.

	-wait
		If this flag is specified, year and day are ignored and the program
		waits until midnight (when new puzzles are released) and then downloads
		the input of the new day. While waiting a countdown is displayed. To
		reduce load on the Advent of Code servers, the download is started after
		a random delay between 2 and 30 seconds after midnight.

	-config path/to/.aocdlconfig
		Read settings from this file instead of searching the home and current
		directories.

	-verbose
		Log what the program is doing to standard error.
"""

REPOSITORY_MESSAGE: Final = """Repository:

	https://github.com/GreenLightning/advent-of-code-downloader
"""

MISSING_SESSION_COOKIE_MESSAGE: Final = """No Session Cookie

A session cookie is required to download your personalized puzzle input.

Please provide your session cookie as a command line parameter:

aocdl -session-cookie 0123456789...abcdef

Or create a configuration file named '.aocdlconfig' in your home directory or in
the current directory and add the 'session-cookie' key:

{
	"session-cookie": "0123456789...abcdef"
}
"""

_INT_RE: Final = re.compile(r"[+-]?[0-9]+")
_BOOL_FLAG_RE: Final = re.compile(r"--?(force|wait)=(.*)", re.DOTALL)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Options:
    config: str = ""
    verbose: bool = False
    help: bool = False


class _Parser(argparse.ArgumentParser):
    def _get_option_tuples(self, option_string: str) -> list:
        # Only exact option strings count; older argparse still matches
        # prefixes of single-dash options despite allow_abbrev=False.
        return []

    def error(self, message: str) -> NoReturn:
        raise ConfigError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="aocdl", add_help=False, allow_abbrev=False)
    parser.add_argument("-session-cookie", "--session-cookie", default="")
    parser.add_argument("-output", "--output", default="")
    parser.add_argument("-year", "--year", default="")
    parser.add_argument("-day", "--day", default="")
    parser.add_argument("-force", "--force", action="store_true")
    parser.add_argument("-wait", "--wait", action="store_true")
    parser.add_argument(
        "-no-force",
        dest="force",
        action="store_false",
        default=False,
        help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "-no-wait",
        dest="wait",
        action="store_false",
        default=False,
        help=argparse.SUPPRESS,
    )
    parser.add_argument("-config", "--config", default="")
    parser.add_argument("-verbose", "--verbose", action="store_true")
    parser.add_argument("-h", "-help", "--help", dest="help", action="store_true")
    return parser


def _parse_int(name: str, text: str) -> int:
    if text == "":
        return 0
    if not _INT_RE.fullmatch(text):
        raise ConfigError(f'invalid value "{text}" for flag -{name}: parse error')
    return int(text)


def _parse_bool(name: str, text: str) -> bool:
    if text in ("1", "t", "T", "TRUE", "true", "True"):
        return True
    if text in ("0", "f", "F", "FALSE", "false", "False"):
        return False
    raise ConfigError(f'invalid boolean value "{text}" for -{name}: parse error')


def _expand_bool_flags(argv: Sequence[str]) -> list[str]:
    """Turn ``-force=false`` style switches into flags the parser knows.

    The last occurrence of a switch wins, so ``-force -force=false`` leaves
    it off.
    """
    expanded = []
    for arg in argv:
        match = _BOOL_FLAG_RE.fullmatch(arg)
        if match:
            name, value = match.groups()
            arg = f"-{name}" if _parse_bool(name, value) else f"-no-{name}"
        expanded.append(arg)
    return expanded


def parse_args(argv: Sequence[str]) -> tuple[Settings, Options]:
    parsed = _build_parser().parse_args(_expand_bool_flags(argv))

    options = Options(config=parsed.config, verbose=parsed.verbose, help=parsed.help)
    if options.help:
        return Settings(), options

    flags = Settings(
        session_cookie=parsed.session_cookie,
        output=parsed.output,
        year=_parse_int("year", parsed.year),
        day=_parse_int("day", parsed.day),
        force=parsed.force,
        wait=parsed.wait,
    )
    return flags, options


def run(flags: Settings, options: Options, now: datetime | None = None) -> Settings:
    settings = merge_all([load_configs(options.config), load_environment(), flags])

    if not settings.session_cookie:
        raise MissingSessionCookieError(MISSING_SESSION_COOKIE_MESSAGE)

    settings, upcoming = resolve_defaults(settings, now)
    settings = render_output(settings)

    # Check before waiting so a conflict does not surface hours later.
    check_output(settings.output, settings.force)

    if settings.wait:
        wait(upcoming)

    download(settings)
    return settings


def main(argv: Sequence[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    try:
        flags, options = parse_args(argv)
    except ConfigError as e:
        print(e, file=sys.stderr)
        print(file=sys.stderr)
        print(USAGE_MESSAGE, file=sys.stderr)
        return 1

    if options.help:
        print(TITLE_ABOUT_MESSAGE)
        print(USAGE_MESSAGE)
        print(REPOSITORY_MESSAGE)
        return 0

    logging.basicConfig(
        level=logging.INFO if options.verbose else logging.WARNING,
        format="%(message)s",
    )

    try:
        settings = run(flags, options)
    except KeyboardInterrupt:
        # end the countdown line before leaving
        print(file=sys.stderr)
        return 130
    except (AocdlError, requests.RequestException, OSError) as e:
        print(e, file=sys.stderr)
        return 1

    logger.info("Saved %s day %s to %s", settings.year, settings.day, settings.output)
    return 0
