from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from . import config
from .extraction import FieldExtractor
from .mailer import TransportError
from .orchestrator import run
from .recipients import DataFormatError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Send one plaintext email per recipient listed in a JSON array."
    )
    parser.add_argument(
        "--recipients",
        default=None,
        help=f"path to the recipient JSON array (default: $RECIPIENTS_FILE or {config.DEFAULT_RECIPIENTS_FILE})",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    load_dotenv(override=False)

    try:
        settings = config.Settings.from_env()
    except config.ConfigurationError as exc:
        logging.error("Missing configuration: %s", exc)
        return 1
    if args.recipients:
        settings.recipients_file = args.recipients

    extractor = FieldExtractor(settings.address_field, settings.body_field)
    try:
        report = run(settings, extractor)
    except DataFormatError as exc:
        logging.error("Invalid recipient list: %s", exc)
        return 1
    except TransportError as exc:
        logging.error("SMTP relay unavailable: %s", exc)
        return 1

    if not report.is_success():
        logging.error("Encountered %s errors:", len(report.errors))
        for error in report.errors:
            logging.error("  %s", error)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
