"""Turn content-table changes into push notification payloads.

Only three tables produce notifications:

- ``audios`` and ``events`` notify when a row flips to published on update.
- ``daily_dose`` notifies on every insert, previewing the start of the content.
"""

from app.core.errors import InvalidEvent
from app.schemas.change_event import ChangeEvent, ChangeType
from app.schemas.notification import NotificationPayload

DOSE_PREVIEW_LENGTH = 60
ELLIPSIS = "..."

PUBLISH_TITLES = {
    "audios": "New Audio Teaching",
    "events": "Upcoming Event",
}
DAILY_DOSE_TITLE = "Today's Dose"


def _became_published(event: ChangeEvent) -> bool:
    if event.change_type != ChangeType.UPDATE:
        return False
    if event.record.get("published") is not True:
        return False
    previous = event.previous_record
    return previous is None or previous.get("published") is False


def _dose_preview(content: str | None) -> str:
    return (content or "")[:DOSE_PREVIEW_LENGTH] + ELLIPSIS


def compose(event: ChangeEvent) -> NotificationPayload | None:
    if not event.table or event.record is None:
        raise InvalidEvent("Change event requires a table and a record")

    record = event.record
    data = {"type": event.table, "id": record.get("id")}

    if event.table in PUBLISH_TITLES:
        if not _became_published(event):
            return None
        return NotificationPayload(
            title=PUBLISH_TITLES[event.table], body=record.get("title") or "", data=data
        )

    if event.table == "daily_dose":
        if event.change_type != ChangeType.INSERT:
            return None
        return NotificationPayload(
            title=DAILY_DOSE_TITLE, body=_dose_preview(record.get("content")), data=data
        )

    return None
