import argparse
import logging
from typing import List, Optional

from .settings import load_settings, Settings
from .logging_utils import configure_logging
from .email_client import GmailMailbox
from .labels import ensure_labels_exist
from .llm_client import ChatClassifier
from .models import RunReport
from .runner import BatchRunner

logger = logging.getLogger(__name__)

def process_once(settings: Optional[Settings] = None, mailbox=None, classifier: Optional[ChatClassifier] = None) -> RunReport:
    settings = settings or load_settings()
    mailbox = mailbox or GmailMailbox.from_credentials(settings.credentials_dir)
    classifier = classifier or ChatClassifier.from_settings(settings)
    return BatchRunner(settings, mailbox, classifier).run()

def setup(settings: Optional[Settings] = None, mailbox=None, classifier: Optional[ChatClassifier] = None) -> bool:
    """Create the category labels and check that the chat API answers."""
    settings = settings or load_settings()
    logger.info("Setting up Gmail job labeler...")
    mailbox = mailbox or GmailMailbox.from_credentials(settings.credentials_dir)
    ensure_labels_exist(mailbox)
    classifier = classifier or ChatClassifier.from_settings(settings)
    if classifier.test_connection():
        logger.info("Setup completed successfully")
        return True
    logger.warning("Setup completed with API connection issues")
    return False

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Label job application emails in Gmail with an LLM")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--setup", action="store_true", help="Create the labels and test the chat API connection")
    group.add_argument("--test-connection", action="store_true", help="Only test the chat API connection")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        settings = load_settings()
        if args.test_connection:
            return 0 if ChatClassifier.from_settings(settings).test_connection() else 1
        if args.setup:
            return 0 if setup(settings) else 1
        report = process_once(settings)
    except Exception:
        # bad config, missing API key, or Gmail OAuth/refresh failures
        logger.exception("Job labeler could not start")
        return 1
    return 0 if report.succeeded else 1

if __name__ == "__main__":
    raise SystemExit(main())
