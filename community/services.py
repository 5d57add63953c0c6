import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, QuerySet, Sum
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from letterings.services import discoverable_letterings, normalize_contributor_tag

from .models import Collection, CollectionItem

log = logging.getLogger(__name__)

LEADERBOARD_SIZE = 50
DEFAULT_CREATOR_TAG = "Anonymous"


# ---- 컬렉션 ----
def public_collections() -> QuerySet:
    return Collection.objects.filter(is_public=True).annotate(item_count=Count("items")).order_by("-created_at")


def create_collection(*, user, name, description=None, creator_tag=None, is_public: bool = True) -> Collection:
    name = str(name or "").strip()
    if not name:
        raise ValidationError("Collection name required")
    if len(name) > 120:
        raise ValidationError("Collection name must be 120 characters or less")
    description = str(description or "").strip()
    if len(description) > 1000:
        raise ValidationError("Collection description must be 1000 characters or less")
    if creator_tag:
        creator_tag = normalize_contributor_tag(creator_tag)
    else:
        creator_tag = (getattr(user, "display_name", None) or DEFAULT_CREATOR_TAG)[:30]

    collection = Collection.objects.create(name=name, description=description, creator_tag=creator_tag, owner=user, is_public=is_public)
    collection.item_count = 0
    log.info("Collection %s created by %s", collection.id, user.pk)
    return collection


def get_visible_collection(collection_id, user=None) -> Collection:
    visible = Q(is_public=True)
    if getattr(user, "is_authenticated", False):
        visible |= Q(owner=user)
    collection = Collection.objects.filter(visible, pk=collection_id).annotate(item_count=Count("items")).first()
    if collection is None:
        raise NotFound("Collection not found")
    return collection


def collection_letterings(collection: Collection) -> QuerySet:
    return discoverable_letterings().filter(collection_items__collection=collection).order_by("-created_at")


def _owned_collection(collection_id, user) -> Collection:
    collection = get_visible_collection(collection_id, user)
    if collection.owner_id != user.pk:
        log.warning("Collection edit denied: user=%s collection=%s", user.pk, collection.pk)
        raise PermissionDenied("You can only modify your own collections")
    return collection


def add_collection_item(collection_id, lettering_id, user) -> CollectionItem:
    collection = _owned_collection(collection_id, user)
    lettering = discoverable_letterings().filter(pk=lettering_id).first()
    if lettering is None:
        raise NotFound("Lettering not found")

    try:
        with transaction.atomic():
            item, created = CollectionItem.objects.get_or_create(collection=collection, lettering=lettering)
    except IntegrityError:
        # 동시에 같은 항목을 넣은 경우
        item, created = CollectionItem.objects.get(collection=collection, lettering=lettering), False
    if created:
        Collection.objects.filter(pk=collection.pk).update(updated_at=item.added_at)
    return item


def remove_collection_item(collection_id, lettering_id, user) -> bool:
    collection = _owned_collection(collection_id, user)
    deleted, _ = CollectionItem.objects.filter(collection=collection, lettering_id=lettering_id).delete()
    return bool(deleted)


# ---- 리더보드 ----
def top_contributors(limit: Optional[int] = None) -> list:
    rows = (
        discoverable_letterings()
        .order_by()
        .values("contributor_tag")
        .annotate(count=Count("id"), total_likes=Sum("likes_count", default=0))
        .order_by("-count", "-total_likes", "contributor_tag")[: limit or LEADERBOARD_SIZE]
    )
    return [{"tag": r["contributor_tag"], "count": r["count"], "total_likes": r["total_likes"]} for r in rows]
