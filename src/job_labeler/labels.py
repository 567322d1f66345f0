import logging
from typing import Dict, Iterable

from .models import Category

logger = logging.getLogger(__name__)

def ensure_labels_exist(mailbox, categories: Iterable[Category] = tuple(Category)) -> Dict[Category, str]:
    """Create any missing category labels and return their Gmail ids.

    A lookup or create failure for one label is logged and skipped, so the
    returned mapping only holds labels known to exist.
    """
    label_ids: Dict[Category, str] = {}
    for category in categories:
        name = category.label_name
        try:
            label = mailbox.get_label_by_name(name)
            if label:
                logger.info("Label already exists: %s", name)
            else:
                label = mailbox.create_label(name)
                logger.info("Created label: %s", name)
            label_ids[category] = label["id"]
        except Exception:
            logger.exception("Error creating label %s", name)
    return label_ids
