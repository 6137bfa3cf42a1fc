# auto_invoice/cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from .config import Settings, default_config_path, load_config
from .errors import ConfigurationError, MailerConfigurationError
from .extractor import scan_archive
from .mailer import MailPaceMailer
from .models import DeliveryOutcome
from .pipeline import run_batch
from .renderer import render_invoice_pdf
from .storage import DirectoryArtifactStore, FileCounterStore
from .validator import parse_config

logger = logging.getLogger("auto_invoice")


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")
    logging.getLogger("pdfminer").setLevel(logging.WARNING)
    logging.getLogger("fontTools").setLevel(logging.WARNING)


def cmd_run(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    try:
        raw = load_config(args.config)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    mailer = MailPaceMailer(settings)
    try:
        mailer.require_settings()
    except MailerConfigurationError as e:
        # checked before the reservation so a misconfigured run spends no numbers
        logger.error("%s", e)
        return 1

    report = run_batch(
        raw,
        counter_store=FileCounterStore(settings.state_dir),
        archive=DirectoryArtifactStore(settings.archive_dir),
        mailer=mailer,
        settings=settings,
        max_workers=args.workers,
    )

    if args.report:
        Path(args.report).write_text(
            json.dumps(report.model_dump(), indent=2, default=str), encoding="utf-8"
        )

    print(f"Status: {report.status}")
    if report.reservation:
        print(f"Invoice numbers: {report.reservation.start}-{report.reservation.end}")
    for r in report.results:
        print(f"  #{r.invoice_number} {r.client_name}: {r.outcome}")

    return 0 if report.ok else 1


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        raw = load_config(args.config)
    except ConfigurationError as e:
        errors = e.errors
    else:
        try:
            parse_config(raw)
            errors = []
        except ConfigurationError as e:
            errors = e.errors

    if not errors:
        print("Configuration OK")
        return 0

    print(f"Configuration has {len(errors)} error(s):")
    for err in errors:
        print(f"  {err}")
    return 1


def cmd_preview(args: argparse.Namespace) -> int:
    """Render every client to a local folder; no counter, no email."""
    settings = Settings.from_env()
    try:
        config = parse_config(load_config(args.config))
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    out_dir = Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)
    today = datetime.now().date()
    failures = 0

    for offset, client in enumerate(config.clients):
        number = args.start + offset
        try:
            pdf_bytes = render_invoice_pdf(
                number,
                config.company,
                client.name,
                client.details,
                client.payment_details,
                client.services,
                issued_on=today,
                due_days=settings.due_days,
            )
        except Exception:
            logger.exception("Failed to render preview %s for %s", number, client.name)
            failures += 1
            continue
        target = out_dir / f"{settings.artifact_name}-{number}.pdf"
        target.write_bytes(pdf_bytes)
        print(f"Wrote {target} ({client.name})")

    return 0 if failures == 0 else 1


def cmd_archive(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    archive = DirectoryArtifactStore(args.archive_dir or settings.archive_dir)
    outcome = DeliveryOutcome(args.outcome) if args.outcome else None

    invoices = scan_archive(archive, outcome)
    if not invoices:
        print("No archived invoices found")
        return 0

    for inv in invoices:
        total = f"{inv.total:.2f}" if inv.total is not None else "?"
        print(f"{inv.outcome:<7} #{inv.invoice_number}  total {total}  {inv.path}")

    failed = sum(1 for inv in invoices if inv.outcome == DeliveryOutcome.FAILED.value)
    if failed:
        print(f"{failed} invoice(s) were not delivered and need manual sending")
    return 0


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(prog="auto-invoice")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Scheduled run: number, render, email and archive invoices")
    p_run.add_argument("--config", default=default_config_path(), help="Company/clients JSON file")
    p_run.add_argument("--report", help="Write the run report as JSON to this file")
    p_run.add_argument("--workers", type=int, default=None,
                       help="Deliver invoices in parallel after numbers are reserved")
    p_run.set_defaults(func=cmd_run)

    p_validate = sub.add_parser("validate", help="Check the configuration file")
    p_validate.add_argument("--config", default=default_config_path(), help="Company/clients JSON file")
    p_validate.set_defaults(func=cmd_validate)

    p_preview = sub.add_parser("preview", help="Render invoices locally without sending")
    p_preview.add_argument("--config", default=default_config_path(), help="Company/clients JSON file")
    p_preview.add_argument("--output", default="preview", help="Output directory")
    p_preview.add_argument("--start", type=int, default=1, help="First sample invoice number")
    p_preview.set_defaults(func=cmd_preview)

    p_archive = sub.add_parser("archive", help="List archived invoices with their totals")
    p_archive.add_argument("--archive-dir", help="Archive root (defaults to AUTO_INVOICE_ARCHIVE_DIR)")
    p_archive.add_argument("--outcome", choices=[o.value for o in DeliveryOutcome])
    p_archive.set_defaults(func=cmd_archive)

    args = parser.parse_args()
    _configure_logging(args.verbose)
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
