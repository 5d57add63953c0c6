import logging
import time

import redis
from django.core.management.base import BaseCommand

from letterings.ml import process_ml_job
from letterings.queue import get_queue

log = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "ML worker: consumes lettering jobs from the Redis queue (REDIS_URL/ML_QUEUE_KEY) and auto-approves processed uploads"

    def add_arguments(self, parser):
        parser.add_argument("--once", action="store_true", help="Process at most one job and exit")
        parser.add_argument("--timeout", type=int, default=5, help="BRPOP timeout in seconds")

    def handle(self, *args, **options):
        queue = get_queue()
        once = options["once"]
        self.stdout.write(self.style.SUCCESS(f"[MlWorker] consuming {queue.key}"))

        try:
            while True:
                try:
                    job = queue.dequeue(timeout=options["timeout"])
                except (redis.ConnectionError, redis.TimeoutError) as e:
                    log.error("Redis unavailable: %s. Reconnecting in 3s...", e)
                    if once:
                        return
                    time.sleep(3)
                    continue

                if job is not None:
                    try:
                        process_ml_job(job)
                    except Exception as e:
                        # 실패한 작업은 재큐잉하지 않는다. 대기 시간 초과 자동 승인이 나중에 처리한다.
                        log.exception("ML job failed: %s", e)

                if once:
                    return
        except KeyboardInterrupt:
            pass
