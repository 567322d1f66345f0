from .models import Category, MessageRecord

BODY_CHAR_LIMIT = 1000

CATEGORY_DESCRIPTIONS = [
    (Category.APPLIED, "Confirmation emails for job applications submitted"),
    (Category.REJECTED, "Rejection emails or emails indicating the application was not successful"),
    (Category.NEXT_STEPS, "Emails asking for availability, assessments, interviews, or any next steps in the hiring process"),
    (Category.NOT_SURE, "If it is job application related but you are not sure about the status"),
    (Category.NOT_JOB_APPLICATION, "If the email is clearly not related to a job application or position, "
                                   "please double check the email is not about a job application or position."),
]

def build_prompt(record: MessageRecord) -> str:
    categories = "\n".join(
        f'{i}. "{category.label_name}" - {description}'
        for i, (category, description) in enumerate(CATEGORY_DESCRIPTIONS, start=1)
    )
    body = (record.body or "")[:BODY_CHAR_LIMIT]
    return (
        "Analyze this email and determine if it's related to a job application or a position. "
        "If it is, categorize it into one of these categories:\n"
        "\n"
        "Email Details:\n"
        f"Subject: {record.subject}\n"
        f"From: {record.sender}\n"
        f"Body: {body}...\n"
        "\n"
        "Categories:\n"
        f"{categories}\n"
        "\n"
        f'Respond with ONLY the category name (e.g., "{Category.APPLIED.label_name}") '
        f'or "{Category.NOT_JOB_APPLICATION.label_name}" if the email is not about a job application or position.'
    )
