import logging
import time
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Optional, Set

import pytz

from .email_client import build_search_query, extract_record
from .labels import ensure_labels_exist
from .llm_client import ChatClassifier
from .models import BatchState, Category, RunOutcome, RunReport
from .prompts import build_prompt
from .response_parser import parse_response
from .settings import Settings

logger = logging.getLogger(__name__)

class BatchRunner:
    """
    One bounded pass over the unlabeled inbox threads.

    Progress is never checkpointed: each run asks Gmail for threads that carry
    none of the category labels, so an interrupted run resumes on the next
    invocation at the first message that was not labeled.
    """

    def __init__(
        self,
        settings: Settings,
        mailbox,
        classifier: ChatClassifier,
        clock: Callable[[], float] = time.monotonic,
        today: Optional[date] = None,
    ) -> None:
        self.settings = settings
        self.mailbox = mailbox
        self.classifier = classifier
        self.clock = clock
        self.today = today

    def _since(self) -> date:
        today = self.today or datetime.now(pytz.timezone(self.settings.timezone)).date()
        return today - timedelta(days=self.settings.since_last_days)

    def _classify(self, message: Dict[str, Any]):
        """Returns (subject, category); every failure falls back to NOT_SURE."""
        subject = message.get("id", "?")
        try:
            record = extract_record(message)
            subject = record.subject
            result = self.classifier.classify(build_prompt(record))
            if not result.ok:
                logger.info("No classification for %r (%s), using %s",
                            subject, result.failure.value, Category.NOT_SURE.label_name)
                return subject, Category.NOT_SURE
            return subject, parse_response(result.text)
        except Exception:
            logger.exception("Error analyzing message %s", message.get("id"))
            return subject, Category.NOT_SURE

    def _label(self, message: Dict[str, Any], category: Category, label_ids: Dict[Category, str]) -> bool:
        label_id = label_ids.get(category)
        if label_id is None:
            logger.error("Label %s is unavailable, leaving message %s unlabeled",
                         category.label_name, message.get("id"))
            return False
        try:
            self.mailbox.add_label(message["id"], label_id)
        except Exception:
            logger.exception("Error applying label %s to message %s",
                             category.label_name, message.get("id"))
            return False
        return True

    def run(self) -> RunReport:
        state = BatchState(started_at=self.clock(), budget_seconds=self.settings.max_runtime_seconds)
        report = RunReport(counts={c: 0 for c in Category})
        days = self.settings.since_last_days

        try:
            label_ids = ensure_labels_exist(self.mailbox)
            if not label_ids:
                raise RuntimeError("none of the category labels could be created")
            query = build_search_query(self._since(), (c.label_name for c in Category))
            threads = self.mailbox.search_threads(query)
        except Exception as exc:
            logger.exception("Error preparing the labeling run")
            report.outcome = RunOutcome.FAILED
            report.error = str(exc)
            return report

        report.threads_seen = len(threads)
        if not threads:
            logger.info("No unlabeled emails found in inbox from the last %d days", days)
            return report
        logger.info("Processing %d unlabeled email threads from the last %d days", len(threads), days)

        category_label_ids: Set[str] = set(label_ids.values())
        for i, thread in enumerate(threads):
            state.thread_index, state.message_index = i, 0
            if state.expired(self.clock()):
                logger.info("Maximum runtime of %ss reached. Processed %d out of %d threads.",
                            state.budget_seconds, state.thread_index, len(threads))
                report.outcome = RunOutcome.BUDGET_EXPIRED
                return report

            try:
                messages = self.mailbox.get_thread_messages(thread)
            except Exception as exc:
                logger.exception("Error fetching thread %s", thread.get("id"))
                report.outcome = RunOutcome.FAILED
                report.error = str(exc)
                return report

            for j, message in enumerate(messages):
                state.message_index = j
                if state.expired(self.clock()):
                    logger.info("Maximum runtime of %ss reached. Processed %d threads and %d messages in current thread.",
                                state.budget_seconds, state.thread_index, state.message_index)
                    report.outcome = RunOutcome.BUDGET_EXPIRED
                    return report
                if category_label_ids.intersection(message.get("labelIds", [])):
                    continue

                subject, category = self._classify(message)
                if self._label(message, category, label_ids):
                    report.messages_labeled += 1
                    report.counts[category] += 1
                    logger.info("Labeled: %s -> %s", subject, category.label_name)
            report.threads_completed += 1

        logger.info("Finished: %d messages labeled across %d threads", report.messages_labeled, report.threads_completed)
        return report
