"""In-memory email adapter. Records every message for assertions."""

from uuid import uuid4

from storefront.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.sent_emails: list[dict] = []
        self.should_succeed = True
        self.raise_error = False

    def configure(self, should_succeed: bool = True, raise_error: bool = False):
        """Make subsequent sends fail, either quietly or by raising."""
        self.should_succeed = should_succeed
        self.raise_error = raise_error

    def send(self, to: str, subject: str, body: str) -> dict:
        if self.raise_error:
            raise ConnectionError("SMTP relay unreachable")
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": "Email delivery failed"}

        message_id = f"email-{uuid4().hex[:12]}"
        self.sent_emails.append({"message_id": message_id, "to": to, "subject": subject, "body": body})
        return {"message_id": message_id, "status": "sent"}
