import pytest

from job_labeler import main as entry
from job_labeler.models import Category, RunOutcome, RunReport
from job_labeler.settings import Settings
from fakes import FakeMailbox, FakeClassifier, make_message

class ConnectedClassifier(FakeClassifier):
    def __init__(self, ok=True, **kwargs):
        super().__init__(**kwargs)
        self.ok = ok

    def test_connection(self):
        return self.ok

def test_setup_creates_labels_and_checks_connection(settings):
    mailbox = FakeMailbox()
    assert entry.setup(settings, mailbox, ConnectedClassifier()) is True
    assert len(mailbox.create_calls) == len(Category)
    assert entry.setup(settings, mailbox, ConnectedClassifier(ok=False)) is False
    assert len(mailbox.create_calls) == len(Category)

def test_process_once_uses_injected_collaborators(settings):
    mailbox = FakeMailbox({"t1": [make_message("m1", subject="We regret to inform you")]})
    report = entry.process_once(settings, mailbox, FakeClassifier(reply="Rejected"))
    assert report.outcome == RunOutcome.COMPLETED
    assert mailbox.label_names_of("m1") == [Category.REJECTED.label_name]

@pytest.fixture
def quiet_main(monkeypatch, settings):
    monkeypatch.setattr(entry, "configure_logging", lambda: None)
    monkeypatch.setattr(entry, "load_settings", lambda: settings)
    return monkeypatch

@pytest.mark.parametrize("outcome, code", [
    (RunOutcome.COMPLETED, 0),
    (RunOutcome.BUDGET_EXPIRED, 0),
    (RunOutcome.FAILED, 1),
])
def test_exit_code_follows_outcome(quiet_main, outcome, code):
    quiet_main.setattr(entry, "process_once", lambda settings: RunReport(outcome=outcome))
    assert entry.main([]) == code

def test_missing_api_key_exits_with_error(quiet_main, caplog):
    quiet_main.setattr(entry, "load_settings", lambda: Settings(api_key=None))
    assert entry.main(["--test-connection"]) == 1
    assert "could not start" in caplog.text

def test_gmail_auth_failure_exits_with_error(quiet_main, caplog):
    def refuse(credentials_dir):
        raise RuntimeError("token refresh failed")

    quiet_main.setattr(entry.GmailMailbox, "from_credentials", staticmethod(refuse))
    assert entry.main([]) == 1
    assert "token refresh failed" in caplog.text
