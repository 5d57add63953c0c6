import json
import logging
from typing import Optional

import redis
from django.conf import settings

log = logging.getLogger(__name__)


class MlJobQueue:
    # Redis list: LPUSH 로 넣고 BRPOP 으로 꺼낸다(FIFO).

    def __init__(self, url: str, key: str = "ml_jobs"):
        self.r = redis.Redis.from_url(url, decode_responses=True, socket_connect_timeout=5)
        self.key = key

    def enqueue(self, lettering_id, image_url: str) -> None:
        self.r.lpush(self.key, json.dumps({"lettering_id": str(lettering_id), "image_url": image_url}))

    def dequeue(self, timeout: int = 5) -> Optional[dict]:
        res = self.r.brpop(self.key, timeout=timeout)
        if not res:
            return None
        _, raw = res
        try:
            job = json.loads(raw)
        except ValueError:
            log.warning("Dropping malformed ML job entry: %.200r", raw)
            return None
        if not isinstance(job, dict):
            log.warning("Dropping non-object ML job entry: %.200r", raw)
            return None
        return job


def get_queue() -> MlJobQueue:
    return MlJobQueue(settings.REDIS_URL, getattr(settings, "ML_QUEUE_KEY", "ml_jobs"))
