# storefront/services/order_number_service.py
import redis

from storefront.domain.pricing import utcnow
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, ORDER_SEQUENCE_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderNumberService:
    """
    Numery zamowien w formacie ORD-<epoch ms>-<sekwencja dnia>.
    Sekwencja to INCR w redisie (atomowy), klucz per dzien z TTL.
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def next_sequence(self, day: str) -> int:
        key = f"orders:seq:{day}"
        pipe = self.redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, ORDER_SEQUENCE_TTL_SECONDS)
        seq, _ = pipe.execute()
        return int(seq)

    def next_order_number(self) -> str:
        now = utcnow()
        seq = self.next_sequence(now.strftime("%Y%m%d"))
        number = f"ORD-{int(now.timestamp() * 1000)}-{seq:04d}"
        logger.info(f"Allocated order number {number}")
        return number
