"""Kafka configuration, topic names, message payloads and client front-ends."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

logger = logging.getLogger(__name__)

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1

_DEFAULT_BATCH_MAX_BYTES = 1024 * 1024
_DEFAULT_FETCH_MAX_BYTES = 50 * 1024 * 1024
_DEFAULT_MAX_POLL_RECORDS = 100
_DEFAULT_FETCH_MAX_WAIT_MS = 500
_DEFAULT_FETCH_MIN_BYTES = 1
_DEFAULT_CONCURRENCY = 1

# Topic names
TOPIC_BI_PROMOTION_RANK = "bi-rank-promotion-event"
TOPIC_RANK_EVENT = "rank-event"
TOPIC_COHORT_INITIALIZATION_EVENT = "cohort-initialization-event"
TOPIC_TASK_UPDATE_EVENT = "task-update-event"
TOPIC_PROP_EVENT = "prop-event"
TOPIC_PURCHASE_EVENT = "purchase-event"
TOPIC_TASK_PROGRESSES_EVENT = "task-progresses-event"
TOPIC_UCS_FE = "tcg-ucs-fe"
TOPIC_UCS_FE_EVENTS = "ucs-fe-events"
TOPIC_MCS_SUCCESS_PLAYER_DEPOSIT = "mcs_success_player_deposit"


def normalize_offset_reset(value: str) -> str:
    """Map ``newest``/``oldest``/empty to ``latest``/``earliest``/``latest``."""
    if value in ("newest", ""):
        return "latest"
    if value == "oldest":
        return "earliest"
    return value


@dataclass
class ProducerTopicConfig:
    """Per-topic producer overrides; zero or empty values leave the global default."""

    acks: str = ""
    compression: str = ""
    retries: int = 0
    retry_backoff_ms: int = 0
    linger_ms: int = 0
    batch_size: int = 0
    max_message_bytes: int = 0


@dataclass
class ProducerConfig:
    """Global producer configuration with optional per-topic overrides."""

    brokers: list[str] = field(default_factory=list)
    client_id: str = ""
    topic: str = ""
    compression: str = ""
    linger_ms: int = 0
    required_acks: int = 0
    request_timeout_ms: int = 0
    batch_max_bytes: int = 0
    topics: dict[str, ProducerTopicConfig] = field(default_factory=dict)

    def effective_topic_config(self, topic: str) -> ProducerTopicConfig:
        """Global defaults merged with the overrides configured for ``topic``."""
        base = ProducerTopicConfig(
            compression=self.compression,
            max_message_bytes=self.effective_batch_max_bytes(),
            linger_ms=self.linger_ms,
        )
        override = self.topics.get(topic)
        if override is None:
            return base
        if override.compression:
            base.compression = override.compression
        if override.max_message_bytes > 0:
            base.max_message_bytes = override.max_message_bytes
        if override.linger_ms > 0:
            base.linger_ms = override.linger_ms
        if override.batch_size > 0:
            base.batch_size = override.batch_size
        if override.acks:
            base.acks = override.acks
        if override.retries > 0:
            base.retries = override.retries
        if override.retry_backoff_ms > 0:
            base.retry_backoff_ms = override.retry_backoff_ms
        return base

    def effective_batch_max_bytes(self) -> int:
        """``batch_max_bytes``, or 1 MiB when unset."""
        return self.batch_max_bytes if self.batch_max_bytes > 0 else _DEFAULT_BATCH_MAX_BYTES

    def request_timeout(self) -> timedelta:
        """Request timeout, 30 seconds when unset."""
        if self.request_timeout_ms > 0:
            return timedelta(milliseconds=self.request_timeout_ms)
        return timedelta(seconds=30)


@dataclass
class ConsumerTopicConfig:
    """Per-topic consumer overrides; zero or empty values leave the global default."""

    group_id: str = ""
    auto_offset_reset: str = ""
    auto_commit_interval_ms: int = 0
    fetch_min_bytes: int = 0
    fetch_max_wait_ms: int = 0
    concurrency: int = 0

    def auto_commit_interval(self) -> timedelta:
        """Auto-commit interval, 5 seconds when unset."""
        if self.auto_commit_interval_ms > 0:
            return timedelta(milliseconds=self.auto_commit_interval_ms)
        return timedelta(seconds=5)

    def fetch_max_wait(self) -> timedelta:
        """Fetch max-wait, 500 milliseconds when unset."""
        if self.fetch_max_wait_ms > 0:
            return timedelta(milliseconds=self.fetch_max_wait_ms)
        return timedelta(milliseconds=_DEFAULT_FETCH_MAX_WAIT_MS)


@dataclass
class ConsumerConfig:
    """Global consumer configuration with optional per-topic overrides."""

    brokers: list[str] = field(default_factory=list)
    client_id: str = ""
    group_id: str = ""
    auto_offset_reset: str = ""
    default_topics: list[str] = field(default_factory=list)
    max_poll_records: int = 0
    fetch_max_wait_ms: int = 0
    session_timeout_ms: int = 0
    heartbeat_interval_ms: int = 0
    concurrency: int = 0
    fetch_max_bytes: int = 0
    fetch_min_bytes: int = 0
    topics: dict[str, ConsumerTopicConfig] = field(default_factory=dict)

    def effective_topic_config(self, topic: str) -> ConsumerTopicConfig:
        """Global defaults merged with the overrides configured for ``topic``."""
        base = ConsumerTopicConfig(
            group_id=self.group_id,
            auto_offset_reset=normalize_offset_reset(self.auto_offset_reset),
            fetch_min_bytes=self._fetch_min_bytes_or_default(),
            fetch_max_wait_ms=self._fetch_max_wait_ms_or_default(),
            concurrency=self._concurrency_or_default(),
        )
        override = self.topics.get(topic)
        if override is None:
            return base
        if override.group_id:
            base.group_id = override.group_id
        if override.auto_offset_reset:
            base.auto_offset_reset = normalize_offset_reset(override.auto_offset_reset)
        if override.fetch_min_bytes > 0:
            base.fetch_min_bytes = override.fetch_min_bytes
        if override.fetch_max_wait_ms > 0:
            base.fetch_max_wait_ms = override.fetch_max_wait_ms
        if override.concurrency > 0:
            base.concurrency = override.concurrency
        if override.auto_commit_interval_ms > 0:
            base.auto_commit_interval_ms = override.auto_commit_interval_ms
        return base

    def session_timeout(self) -> timedelta:
        """Session timeout, 10 seconds when unset."""
        if self.session_timeout_ms > 0:
            return timedelta(milliseconds=self.session_timeout_ms)
        return timedelta(seconds=10)

    def heartbeat_interval(self) -> timedelta:
        """Heartbeat interval, 3 seconds when unset."""
        if self.heartbeat_interval_ms > 0:
            return timedelta(milliseconds=self.heartbeat_interval_ms)
        return timedelta(seconds=3)

    def fetch_max_bytes_or_default(self) -> int:
        """``fetch_max_bytes``, or 50 MiB when unset."""
        return self.fetch_max_bytes if self.fetch_max_bytes > 0 else _DEFAULT_FETCH_MAX_BYTES

    def max_poll_records_or_default(self) -> int:
        """``max_poll_records``, or 100 when unset."""
        return self.max_poll_records if self.max_poll_records > 0 else _DEFAULT_MAX_POLL_RECORDS

    def _fetch_max_wait_ms_or_default(self) -> int:
        return self.fetch_max_wait_ms if self.fetch_max_wait_ms > 0 else _DEFAULT_FETCH_MAX_WAIT_MS

    def _fetch_min_bytes_or_default(self) -> int:
        return self.fetch_min_bytes if self.fetch_min_bytes > 0 else _DEFAULT_FETCH_MIN_BYTES

    def _concurrency_or_default(self) -> int:
        return self.concurrency if self.concurrency > 0 else _DEFAULT_CONCURRENCY


@dataclass
class KafkaConfig:
    """Root Kafka configuration: a producer and a consumer section."""

    producer: ProducerConfig = field(default_factory=ProducerConfig)
    consumer: ConsumerConfig = field(default_factory=ConsumerConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> KafkaConfig:
        """Build from a mapping such as a parsed ``[kafka]`` TOML table.

        Missing keys take their defaults and unknown keys are ignored; a value of
        the wrong type raises TypeError, an out-of-range integer ValueError.
        """
        return _build(cls, data, "kafka")


# Field kinds for loading configuration mappings.
_STR = "str"
_INT = "int"
_STR_LIST = "str_list"

_SCHEMAS: dict[type, dict[str, Any]] = {
    ProducerTopicConfig: {
        "acks": _STR,
        "compression": _STR,
        "retries": _INT,
        "retry_backoff_ms": _INT,
        "linger_ms": _INT,
        "batch_size": _INT,
        "max_message_bytes": _INT,
    },
    ProducerConfig: {
        "brokers": _STR_LIST,
        "client_id": _STR,
        "topic": _STR,
        "compression": _STR,
        "linger_ms": _INT,
        "required_acks": _INT,
        "request_timeout_ms": _INT,
        "batch_max_bytes": _INT,
        "topics": ("map", ProducerTopicConfig),
    },
    ConsumerTopicConfig: {
        "group_id": _STR,
        "auto_offset_reset": _STR,
        "auto_commit_interval_ms": _INT,
        "fetch_min_bytes": _INT,
        "fetch_max_wait_ms": _INT,
        "concurrency": _INT,
    },
    ConsumerConfig: {
        "brokers": _STR_LIST,
        "client_id": _STR,
        "group_id": _STR,
        "auto_offset_reset": _STR,
        "default_topics": _STR_LIST,
        "max_poll_records": _INT,
        "fetch_max_wait_ms": _INT,
        "session_timeout_ms": _INT,
        "heartbeat_interval_ms": _INT,
        "concurrency": _INT,
        "fetch_max_bytes": _INT,
        "fetch_min_bytes": _INT,
        "topics": ("map", ConsumerTopicConfig),
    },
    KafkaConfig: {
        "producer": ProducerConfig,
        "consumer": ConsumerConfig,
    },
}


def _build(cls: type, data: Any, where: str) -> Any:
    if not isinstance(data, Mapping):
        raise TypeError(f"{where}: expected a table, got {type(data).__name__}")
    schema = _SCHEMAS[cls]
    values = {
        name: _convert(data[name], kind, f"{where}.{name}")
        for name, kind in schema.items()
        if name in data
    }
    return cls(**values)


def _convert(value: Any, kind: Any, where: str) -> Any:
    if kind == _STR:
        if not isinstance(value, str):
            raise TypeError(f"{where}: expected a string, got {type(value).__name__}")
        return value
    if kind == _INT:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{where}: expected an integer, got {type(value).__name__}")
        if not _I32_MIN <= value <= _I32_MAX:
            raise ValueError(f"{where}: integer {value} out of range")
        return value
    if kind == _STR_LIST:
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
            raise TypeError(f"{where}: expected a list of strings, got {type(value).__name__}")
        return [_convert(item, _STR, f"{where}[{i}]") for i, item in enumerate(value)]
    if isinstance(kind, tuple):
        _, item_cls = kind
        if not isinstance(value, Mapping):
            raise TypeError(f"{where}: expected a table, got {type(value).__name__}")
        result = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"{where}: keys must be strings")
            result[key] = _build(item_cls, item, f"{where}.{key}")
        return result
    return _build(kind, value, where)


@dataclass
class TaskUpdate:
    """Payload of the task-update topic."""

    message: str
    task_type: int
    task_id: int
    task_item_id: int
    task_item_progresses_id: int


@dataclass
class SendProp:
    """Payload of the prop topic; track_type is 0=none 1=line 2=parabola 3=spiral."""

    send_user_id: int
    receive_user_id: int
    prop_id: int
    track_type: int


@dataclass
class BuyErrorInfo:
    """Payload of the purchase topic for failed purchases."""

    purchase_key: str
    price: float
    coins: int


class KafkaError(Exception):
    """A Kafka operation failed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Kafka error: {message}")


class ProducerNotInitializedError(KafkaError):
    """No broker client is available to deliver produced messages."""

    def __init__(self) -> None:
        Exception.__init__(self, "Kafka producer not initialized")


class ConsumerNotInitializedError(KafkaError):
    """No broker client is available to consume messages."""

    def __init__(self) -> None:
        Exception.__init__(self, "Kafka consumer not initialized")


@dataclass
class Record:
    """A Kafka message."""

    topic: str
    key: bytes
    value: bytes
    partition: int = 0
    offset: int = 0


MessageHandler = Callable[[Record], None]


class Producer:
    """Producer front-end; without a broker client every send is refused."""

    def __init__(self, config: ProducerConfig) -> None:
        self.config = config
        self.closed = False

    @classmethod
    def create(cls, config: ProducerConfig) -> Producer | None:
        """Return a producer, or None when the configuration names no brokers."""
        if not config.brokers:
            logger.error("kafka producer config is invalid — no brokers")
            return None
        logger.info(
            "kafka producer initialized brokers=%s client_id=%s topic=%s",
            config.brokers,
            config.client_id,
            config.topic,
        )
        return cls(config)

    async def produce(self, key: bytes, value: bytes) -> None:
        """Send to the default topic; raises ProducerNotInitializedError."""
        logger.debug(
            "kafka produce not delivered topic=%s key_len=%d value_len=%d",
            self.config.topic,
            len(key),
            len(value),
        )
        raise ProducerNotInitializedError()

    async def produce_to(self, topic: str, key: bytes, value: bytes) -> None:
        """Send to ``topic``; raises ProducerNotInitializedError."""
        logger.debug(
            "kafka produce_to not delivered topic=%s key_len=%d value_len=%d",
            topic,
            len(key),
            len(value),
        )
        raise ProducerNotInitializedError()

    def close(self) -> None:
        """Release the producer and mark it closed."""
        if self.closed:
            return
        self.closed = True
        logger.info("kafka producer closed")


class Consumer:
    """Consumer front-end; without a broker client subscriptions are refused."""

    def __init__(self, config: ConsumerConfig) -> None:
        self.config = config
        self.closed = False

    @classmethod
    def create(cls, config: ConsumerConfig) -> Consumer | None:
        """Return a consumer, or None when the configuration names no brokers."""
        if not config.brokers:
            logger.error("kafka consumer config is invalid — no brokers")
            return None
        logger.info(
            "kafka consumer initialized brokers=%s client_id=%s",
            config.brokers,
            config.client_id,
        )
        return cls(config)

    async def subscribe_topic(self, topic: str, handler: MessageHandler) -> None:
        """Subscribe ``handler`` to ``topic``; raises ConsumerNotInitializedError."""
        topic_cfg = self.config.effective_topic_config(topic)
        logger.info(
            "kafka subscribe_topic not consuming topic=%s group_id=%s concurrency=%d",
            topic,
            topic_cfg.group_id,
            topic_cfg.concurrency,
        )
        raise ConsumerNotInitializedError()

    async def close(self) -> None:
        """Release the consumer and mark it closed."""
        if self.closed:
            return
        self.closed = True
        logger.info("kafka consumer closed")


@dataclass
class KafkaClients:
    """The producer and consumer built from a configuration, each possibly absent."""

    producer: Producer | None = None
    consumer: Consumer | None = None

    @classmethod
    def from_config(cls, config: KafkaConfig) -> KafkaClients:
        """Create whichever clients have brokers configured."""
        producer = Producer.create(config.producer) if config.producer.brokers else None
        consumer = Consumer.create(config.consumer) if config.consumer.brokers else None
        return cls(producer=producer, consumer=consumer)