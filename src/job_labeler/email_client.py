import os, base64, re, logging
from datetime import date, datetime, timezone
from typing import List, Dict, Any, Iterable, Optional
import dateparser
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from google.auth.transport.requests import Request
from googleapiclient.discovery import build

from .models import MessageRecord

logger = logging.getLogger(__name__)

# modify is needed to create labels and add them to messages
SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]

def _ensure_creds(credentials_dir: str, scopes: List[str]) -> Credentials:
    os.makedirs(credentials_dir, exist_ok=True)
    client_secret_file = os.path.join(credentials_dir, "client_secret.json")
    token_file = os.path.join(credentials_dir, "token.json")
    creds: Optional[Credentials] = None
    if os.path.exists(token_file):
        creds = Credentials.from_authorized_user_file(token_file, scopes)
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            flow = InstalledAppFlow.from_client_secrets_file(client_secret_file, scopes)
            creds = flow.run_local_server(port=0)
        with open(token_file, "w", encoding="utf-8") as token:
            token.write(creds.to_json())
    return creds

def get_gmail_service(credentials_dir: str):
    creds = _ensure_creds(credentials_dir, SCOPES)
    return build("gmail", "v1", credentials=creds)

def build_search_query(since: date, label_names: Iterable[str]) -> str:
    """Inbox threads received on or after `since` that carry none of the labels."""
    terms = ["in:inbox", f"after:{since.strftime('%Y/%m/%d')}"]
    terms.extend(f'-label:"{name}"' for name in label_names)
    return " ".join(terms)

class GmailMailbox:
    """Thin wrapper over the Gmail v1 service for the calls the labeler needs."""

    def __init__(self, service, user_id: str = "me"):
        self.service = service
        self.user_id = user_id

    @classmethod
    def from_credentials(cls, credentials_dir: str) -> "GmailMailbox":
        return cls(get_gmail_service(credentials_dir))

    def search_threads(self, query: str) -> List[Dict[str, Any]]:
        threads: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        while True:
            kwargs: Dict[str, Any] = {"userId": self.user_id, "q": query}
            if page_token:
                kwargs["pageToken"] = page_token
            resp = self.service.users().threads().list(**kwargs).execute()
            threads.extend(resp.get("threads", []))
            page_token = resp.get("nextPageToken")
            if not page_token:
                break
        logger.debug("Query %r matched %d threads", query, len(threads))
        return threads

    def get_thread_messages(self, thread: Dict[str, Any]) -> List[Dict[str, Any]]:
        full = self.service.users().threads().get(
            userId=self.user_id, id=thread["id"], format="full"
        ).execute()
        return full.get("messages", [])

    def get_label_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        resp = self.service.users().labels().list(userId=self.user_id).execute()
        for label in resp.get("labels", []):
            if label.get("name") == name:
                return label
        return None

    def create_label(self, name: str) -> Dict[str, Any]:
        body = {
            "name": name,
            "labelListVisibility": "labelShow",
            "messageListVisibility": "show",
        }
        return self.service.users().labels().create(userId=self.user_id, body=body).execute()

    def add_label(self, message_id: str, label_id: str) -> None:
        # Gmail ignores ids the message already carries
        self.service.users().messages().modify(
            userId=self.user_id, id=message_id, body={"addLabelIds": [label_id]}
        ).execute()

def _get_header(headers: List[Dict[str, str]], name: str) -> str:
    for h in headers:
        if h.get("name", "").lower() == name.lower():
            return h.get("value", "")
    return ""

def _decode_payload(data: str) -> str:
    # Gmail returns base64url-encoded data
    missing_padding = len(data) % 4
    if missing_padding:
        data += "=" * (4 - missing_padding)
    return base64.urlsafe_b64decode(data).decode("utf-8", errors="replace")

def _clean_text(s: str) -> str:
    s = re.sub(r"[\u200B-\u200D\uFEFF]", "", s or "")
    s = re.sub(r"[ \t]+", " ", s)
    s = re.sub(r"\s+\n", "\n", s)
    return s.strip()

def _plain_body(payload: Dict[str, Any]) -> str:
    plain: List[str] = []
    html: List[str] = []
    def traverse(parts):
        for p in parts:
            mime = p.get("mimeType", "")
            if "parts" in p:
                traverse(p["parts"])
            elif mime == "text/plain" and "data" in p.get("body", {}):
                plain.append(_decode_payload(p["body"]["data"]))
            elif mime == "text/html" and "data" in p.get("body", {}):
                html.append(re.sub("<[^<]+?>", " ", _decode_payload(p["body"]["data"])))

    if "parts" in payload:
        traverse(payload["parts"])
    else:
        body = payload.get("body", {})
        if "data" in body:
            text = _decode_payload(body["data"])
            if payload.get("mimeType") == "text/html":
                text = re.sub("<[^<]+?>", " ", text)
            plain.append(text)
    # prefer the text/plain alternative when both are present
    return "\n".join(plain or html)

def _received_at(message: Dict[str, Any], headers: List[Dict[str, str]]) -> Optional[datetime]:
    internal = message.get("internalDate")
    if internal:
        return datetime.fromtimestamp(int(internal) / 1000, tz=timezone.utc)
    header = _get_header(headers, "Date")
    return dateparser.parse(header) if header else None

def extract_record(message: Dict[str, Any]) -> MessageRecord:
    payload = message.get("payload", {})
    headers = payload.get("headers", [])
    return MessageRecord(
        message_id=message.get("id", ""),
        thread_id=message.get("threadId", ""),
        subject=_clean_text(_get_header(headers, "Subject")),
        sender=_clean_text(_get_header(headers, "From")),
        body=_clean_text(_plain_body(payload)),
        received_at=_received_at(message, headers),
    )
