import logging
import os
import stat
from typing import Final

import requests

from .errors import FetchError, OutputExistsError, OutputIsDirectoryError
from .settings import Settings

BASE_URL: Final = "https://adventofcode.com"
USER_AGENT: Final = "github.com/GreenLightning/advent-of-code-downloader"
CHUNK_SIZE: Final = 64 * 1024

logger = logging.getLogger(__name__)


def input_url(year: int | str, day: int | str) -> str:
    return f"{BASE_URL}/{year}/day/{day}/input"


def _exists_message(path: str) -> str:
    return f"file '{path}' already exists; use '-force' to overwrite"


def check_output(path: str, force: bool) -> None:
    """Refuse early when the output cannot or should not be written.

    This is only a courtesy check before waiting or downloading; the file
    is opened exclusively later on, which is what actually guards it.
    """
    try:
        info = os.stat(path)
    except FileNotFoundError:
        return
    except OSError as e:
        raise FetchError(f"failed to check output file '{path}': {e}") from e

    if stat.S_ISDIR(info.st_mode):
        raise OutputIsDirectoryError(
            f"cannot write to '{path}' because it is a directory"
        )
    if not force:
        raise OutputExistsError(_exists_message(path))


def download(settings: Settings) -> int:
    url = input_url(settings.year, settings.day)
    logger.info("Fetching %s", url)

    with requests.get(
        url,
        cookies=dict(session=settings.session_cookie),
        headers={"User-Agent": USER_AGENT},
        stream=True,
    ) as r:
        if r.status_code != 200:
            raise FetchError(f"{r.status_code} {r.reason}")

        mode = "wb" if settings.force else "xb"
        try:
            f = open(settings.output, mode)
        except FileExistsError as e:
            raise OutputExistsError(_exists_message(settings.output)) from e

        written = 0
        with f:
            for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                f.write(chunk)
                written += len(chunk)

    logger.info("Wrote %d bytes to %s", written, settings.output)
    return written
