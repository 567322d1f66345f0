from job_labeler.models import Category, MessageRecord
from job_labeler.prompts import build_prompt, BODY_CHAR_LIMIT

def _record(body):
    return MessageRecord(message_id="m1", thread_id="t1", subject="Interview invite",
                         sender="Globex <hr@globex.com>", body=body)

def test_prompt_embeds_headers_and_all_categories():
    prompt = build_prompt(_record("Please pick a time."))
    assert "Subject: Interview invite" in prompt
    assert "From: Globex <hr@globex.com>" in prompt
    assert "Body: Please pick a time...." in prompt
    for category in Category:
        assert f'"{category.label_name}"' in prompt

def test_body_is_cut_at_limit():
    body = "x" * (BODY_CHAR_LIMIT - 1) + "QW" + "W" * 500
    prompt = build_prompt(_record(body))
    assert "Body: " + "x" * (BODY_CHAR_LIMIT - 1) + "Q...\n" in prompt
    assert "QW" not in prompt
    assert "WWW" not in prompt

def test_prompt_is_deterministic():
    record = _record("same body")
    assert build_prompt(record) == build_prompt(record)
