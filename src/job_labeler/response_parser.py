from typing import Optional

from .models import Category

# Order matters: the first matching rule wins.
KEYWORD_RULES = [
    (Category.NOT_JOB_APPLICATION, ("not job app", "not_job_related", "not job related")),
    (Category.APPLIED, ("applied",)),
    (Category.REJECTED, ("reject", "rejection")),
    (Category.NEXT_STEPS, ("next steps", "next step")),
    (Category.NOT_SURE, ("not sure",)),
]

def parse_response(text: Optional[str]) -> Category:
    lowered = (text or "").lower()
    for category, keywords in KEYWORD_RULES:
        if any(k in lowered for k in keywords):
            return category
    for category in Category:
        if category.label_name.lower() in lowered:
            return category
    return Category.NOT_SURE
