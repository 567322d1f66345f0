from job_labeler.labels import ensure_labels_exist
from job_labeler.models import Category
from fakes import FakeMailbox

def test_creates_missing_labels_once():
    mailbox = FakeMailbox()
    first = ensure_labels_exist(mailbox)
    second = ensure_labels_exist(mailbox)
    assert sorted(mailbox.create_calls) == sorted(c.label_name for c in Category)
    assert first == second
    assert set(first) == set(Category)

def test_existing_labels_are_not_recreated():
    mailbox = FakeMailbox(existing_labels=[Category.APPLIED.label_name])
    ensure_labels_exist(mailbox)
    assert Category.APPLIED.label_name not in mailbox.create_calls
    assert len(mailbox.create_calls) == 4

def test_one_failing_label_does_not_stop_the_rest(caplog):
    class Flaky(FakeMailbox):
        def create_label(self, name):
            if name == Category.REJECTED.label_name:
                raise RuntimeError("quota")
            return super().create_label(name)

    mailbox = Flaky()
    label_ids = ensure_labels_exist(mailbox)
    assert Category.REJECTED not in label_ids
    assert len(label_ids) == 4
    assert "Error creating label [LBot]: Reject" in caplog.text
