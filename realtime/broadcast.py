import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from .groups import PUBLIC_FEED_GROUP

log = logging.getLogger(__name__)


def broadcast_processed(lettering_id) -> None:
    # 승인 트랜잭션은 이미 끝났으므로 전송 실패는 로그만 남긴다.
    layer = get_channel_layer()
    if layer is None:
        log.warning("No channel layer configured; PROCESSED %s not broadcast", lettering_id)
        return
    try:
        async_to_sync(layer.group_send)(PUBLIC_FEED_GROUP, {"type": "feed.processed", "id": str(lettering_id)})
    except Exception:
        log.exception("Failed to broadcast PROCESSED for lettering %s", lettering_id)
