import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=10,   # 初始重试延迟（秒），指数退避会乘以 2^retry_count
    acks_late=True,           # 任务执行完才 ack，防止 worker 崩溃时任务丢失
    reject_on_worker_lost=True,
)
def backfill_soundex_codes(self):
    """
    异步回填患者的 Soundex 编码（soundex_first / soundex_last）。

    重试策略：
      - 最多重试 3 次
      - 指数退避：10s → 20s → 40s
      - 超出次数后记录 error 并放弃，下次调度再跑（幂等）
    """
    from patients.services import backfill_soundex

    logger.info("[Celery][backfill_soundex_codes] 开始回填 (attempt %d/%d)",
                self.request.retries + 1, self.max_retries + 1)

    try:
        count = backfill_soundex()
    except Exception as exc:
        logger.warning(
            "[Celery] Soundex 回填失败 (attempt %d): %s",
            self.request.retries + 1, str(exc)
        )
        if self.request.retries < self.max_retries:
            countdown = self.default_retry_delay * (2 ** self.request.retries)
            logger.info("[Celery] 将在 %ds 后重试 (第 %d 次)...", countdown, self.request.retries + 1)
            raise self.retry(exc=exc, countdown=countdown)
        logger.error("[Celery] Soundex 回填已达最大重试次数，放弃")
        raise

    logger.info("[Celery] Soundex 回填完成，更新 %d 个患者", count)
    return count
