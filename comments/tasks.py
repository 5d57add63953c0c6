import logging

from celery import shared_task

from common.events import publish_event

log = logging.getLogger(__name__)


@shared_task(bind=True, name="comments.tasks.on_comment_created", autoretry_for=(Exception,), retry_backoff=2, max_retries=5)
def on_comment_created(self, comment_id: str, lettering_id: str, author_id: str = "", status: str = "", needs_review: bool = False):
    publish_event(
        "CommentCreated",
        {
            "comment_id": comment_id,
            "lettering_id": lettering_id,
            "author_id": author_id,
            "status": status,
            "needs_review": needs_review,
        },
        key="comment.created",
    )


@shared_task(bind=True, name="comments.tasks.on_comment_deleted", autoretry_for=(Exception,), retry_backoff=2, max_retries=5)
def on_comment_deleted(self, comment_id: str, lettering_id: str, author_id: str = ""):
    publish_event(
        "CommentDeleted",
        {
            "comment_id": comment_id,
            "lettering_id": lettering_id,
            "author_id": author_id,
        },
        key="comment.deleted",
    )
