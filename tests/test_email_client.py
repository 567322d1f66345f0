from datetime import date, datetime, timezone

from job_labeler import email_client as ec
from fakes import b64, make_message

def test_extract_record_plain_message():
    record = ec.extract_record(make_message("m1", subject="Application received",
                                            body="Thank you for applying to Acme."))
    assert record.message_id == "m1"
    assert record.thread_id == "t1"
    assert record.subject == "Application received"
    assert record.sender == "Acme Careers <jobs@acme.com>"
    assert record.body == "Thank you for applying to Acme."
    assert record.received_at == datetime.fromtimestamp(1760000000, tz=timezone.utc)

def test_extract_record_prefers_plain_part():
    message = {
        "id": "m2",
        "threadId": "t2",
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [{"name": "subject", "value": "Interview"}, {"name": "Date", "value": "Mon, 6 Oct 2025 10:00:00 +0000"}],
            "parts": [
                {"mimeType": "text/plain", "body": {"data": b64("Plain  body\u200b")}},
                {"mimeType": "text/html", "body": {"data": b64("<p>Html body</p>")}},
            ],
        },
    }
    record = ec.extract_record(message)
    assert record.subject == "Interview"
    assert record.body == "Plain body"
    assert record.received_at.date() == date(2025, 10, 6)

def test_extract_record_html_only():
    message = {"id": "m3", "payload": {"parts": [
        {"mimeType": "text/html", "body": {"data": b64("<div>Next <b>steps</b></div>")}},
    ]}}
    record = ec.extract_record(message)
    assert "Next" in record.body and "steps" in record.body
    assert "<" not in record.body

def test_build_search_query():
    query = ec.build_search_query(date(2026, 1, 5), ["[LBot]: Applied", "[LBot]: Reject"])
    assert query == 'in:inbox after:2026/01/05 -label:"[LBot]: Applied" -label:"[LBot]: Reject"'
