"""Plain terminal loop: paste an identifier, get a citation on the clipboard."""

from __future__ import annotations

import asyncio

from colorama import Fore, Style, init

from .actions import copy_citation
from .config import Settings
from .errors import CitationError
from .extractor import extract

_PROMPT = Fore.CYAN + "Enter a URL, DOI, ISBN, or YouTube link: " + Style.RESET_ALL
_QUIT_WORDS = frozenset({"q", "quit", "exit"})


async def _loop(settings: Settings, *, copy: bool) -> None:
    async with settings.client() as client:
        while True:
            try:
                raw = await asyncio.to_thread(input, _PROMPT)
            except EOFError:
                return
            if raw.strip().lower() in _QUIT_WORDS:
                return
            try:
                result = await extract(raw, client)
            except CitationError as exc:
                print(Fore.RED + f"⚠ {exc}" + Style.RESET_ALL)
                print()
                continue

            citation = result.format(settings.default_style)
            print(Fore.GREEN + f"{settings.default_style.value} Citation:", citation + Style.RESET_ALL)
            if copy:
                try:
                    copy_citation(citation)
                    print(Style.DIM + "(copied to clipboard)" + Style.RESET_ALL)
                except CitationError as exc:
                    print(Fore.YELLOW + str(exc) + Style.RESET_ALL)
            print()


def run(settings: Settings, *, copy: bool = True) -> None:
    init()
    try:
        asyncio.run(_loop(settings, copy=copy))
    except KeyboardInterrupt:
        print()
