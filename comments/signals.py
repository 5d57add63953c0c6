from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from common.events import spawn_on_commit

from . import tasks
from .models import Comment


@receiver(post_save, sender=Comment)
def on_comment_created(sender, instance: Comment, created: bool, **kwargs):
    if not created:
        return
    spawn_on_commit(
        tasks.on_comment_created,
        comment_id=str(instance.id),
        lettering_id=str(instance.lettering_id),
        author_id=str(instance.user_id) if instance.user_id else "",
        status=instance.status,
        needs_review=instance.needs_review,
    )


@receiver(post_delete, sender=Comment)
def on_comment_deleted(sender, instance: Comment, **kwargs):
    spawn_on_commit(
        tasks.on_comment_deleted,
        comment_id=str(instance.id),
        lettering_id=str(instance.lettering_id),
        author_id=str(instance.user_id) if instance.user_id else "",
    )
