from __future__ import annotations

import logging
import sys

import schedule
from dotenv import load_dotenv

from event_digest import config
from event_digest.mailer import DigestMailer, MailError, SmtpMailer
from event_digest.prismic_client import PrismicClient
from event_digest.scheduler import register_jobs, run_forever


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    try:
        settings = config.Settings.from_env()
    except ValueError as exc:
        logging.error("Missing configuration: %s", exc)
        sys.exit(1)

    transport = SmtpMailer(settings.smtp_config())
    try:
        transport.verify()
    except MailError as exc:
        logging.error("SMTP transport unusable, refusing to start: %s", exc)
        sys.exit(1)

    client = PrismicClient(settings.prismic_repository, access_token=settings.prismic_access_token)
    mailer = DigestMailer(
        transport,
        sender_name=settings.from_name,
        sender_email=settings.smtp_user,
        mailing_list=settings.mailing_list,
        list_name=settings.list_name,
    )
    logging.info("Using Prismic endpoint=%s mailing list=%s", client.endpoint, settings.mailing_list)

    scheduler = schedule.Scheduler()
    register_jobs(scheduler, client, mailer, lang=config.LANG)
    try:
        run_forever(scheduler)
    except KeyboardInterrupt:
        logging.info("Interrupted; shutting down.")
    finally:
        client.close()


if __name__ == "__main__":
    main()
