"""
Command line interface for tess-client.

Commands:
- text: print recognized text for an image
- hocr: print hOCR markup for an image
- version: print the Tesseract version
- clear-cache: clear the process-wide engine cache

Defaults come from ~/.tess-client.json and TESS_CLIENT_* environment
variables; command line options override them.
"""

import argparse
import dataclasses
import functools
import sys
from typing import List, Optional

from . import __version__
from .core.client import Client, clear_persistent_cache, engine_version
from .core.config import ClientConfig, get_config
from .core.errors import TessClientError
from .ocr.tesseract_engine import TesseractEngine
from .utils.logger import setup_logger


def _parse_variable(raw: str):
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got '{raw}'")
    return key, value


def _add_ocr_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("image", help="Path to the image file")
    parser.add_argument("-l", "--lang", action="append", dest="languages",
                        help="Language to recognize (repeatable, e.g. -l eng -l deu)")
    parser.add_argument("--psm", type=int, default=None, choices=range(14),
                        help="Page segmentation mode (0-13)")
    parser.add_argument("--config", dest="config_file", default=None,
                        help="Tesseract config file")
    parser.add_argument("--tessdata-dir", default=None,
                        help="Directory containing tessdata")
    parser.add_argument("-c", dest="variables", action="append", type=_parse_variable,
                        default=[], metavar="KEY=VALUE",
                        help="Set a Tesseract variable (repeatable)")
    parser.add_argument("--whitelist", default=None, help="Characters to recognize")
    parser.add_argument("--blacklist", default=None, help="Characters to ignore")
    parser.add_argument("--no-trim", action="store_true",
                        help="Keep leading/trailing newlines in text output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tess-client",
                                     description="Run Tesseract OCR on an image")
    parser.add_argument("--tesseract-cmd", default=None,
                        help="Path to the tesseract executable")
    parser.add_argument("--log-level", default=None,
                        help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--version", action="version", version=f"tess-client {__version__}")

    sub = parser.add_subparsers(dest="cmd", required=True)

    text = sub.add_parser("text", help="Print recognized text")
    _add_ocr_arguments(text)

    hocr = sub.add_parser("hocr", help="Print hOCR output")
    _add_ocr_arguments(hocr)

    sub.add_parser("version", help="Print the Tesseract version")
    sub.add_parser("clear-cache", help="Clear the process-wide engine cache")

    return parser


def _build_client(args: argparse.Namespace, config: ClientConfig) -> Client:
    client = Client.from_config(config)
    try:
        if args.languages:
            client.set_languages(*args.languages)
        if args.tessdata_dir:
            client.set_tessdata_prefix(args.tessdata_dir)
        if args.psm is not None:
            client.set_page_seg_mode(args.psm)
        if args.config_file:
            client.set_config_file(args.config_file)
        for key, value in args.variables:
            client.set_variable(key, value)
        if args.whitelist is not None:
            client.set_whitelist(args.whitelist)
        if args.blacklist is not None:
            client.set_blacklist(args.blacklist)
        if args.no_trim:
            client.set_trim(False)
        client.set_image(args.image)
    except Exception:
        client.close()
        raise
    return client


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the tess-client command.

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    if args.tesseract_cmd:
        config = dataclasses.replace(config, tesseract_cmd=args.tesseract_cmd)
    setup_logger(level=args.log_level or config.log_level, log_to_file=config.log_to_file)

    engine_factory = functools.partial(TesseractEngine, config.tesseract_cmd)

    try:
        if args.cmd == "version":
            print(engine_version(engine_factory))
        elif args.cmd == "clear-cache":
            clear_persistent_cache(engine_factory)
        else:
            with _build_client(args, config) as client:
                out = client.text() if args.cmd == "text" else client.hocr_text()
            print(out)
    except TessClientError as e:
        print(f"tess-client: {e}", file=sys.stderr)
        return 1
    return 0


def run() -> None:
    sys.exit(main())
