from typing import Dict, Tuple

from common.events import spawn

from .models import Notification
from .tasks import notify_user

T = Notification.Type

# type -> (title, body)
CATALOGUE: Dict[str, Tuple[str, str]] = {
    T.MODERATION_APPROVED: ("Your upload was approved", "Your lettering contribution has been approved and is now publicly visible."),
    T.MODERATION_REJECTED: ("Your upload was rejected", "Your lettering contribution was rejected by moderation."),
    T.MODERATION_DELETED: ("Your upload was deleted", "Your lettering contribution was removed by moderation."),
    T.REPORTS_CLEARED: ("Reports cleared on your upload", "Moderator reviewed and cleared reports on your lettering contribution."),
    T.COMMENT_HIDDEN: ("Your comment was hidden", "A moderator hid one of your comments due to policy concerns."),
    T.COMMENT_RESTORED: ("Your comment was restored", "A moderator restored your comment."),
    T.COMMENT_DELETED: ("Your comment was deleted", "A moderator removed one of your comments."),
}


def _send(user_id, kind: str, metadata: Dict) -> None:
    if not user_id:
        return
    title, body = CATALOGUE[kind]
    spawn(notify_user, str(user_id), str(kind), title, body, metadata)


def notify_lettering_owner(lettering, kind: str) -> None:
    _send(lettering.user_id, kind, {"lettering_id": str(lettering.id)})


def notify_comment_owner(comment, kind: str, reason: str | None = None) -> None:
    _send(comment.user_id, kind, {"comment_id": str(comment.id), "reason": reason})
