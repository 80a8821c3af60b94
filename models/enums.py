"""Enums for metric names, operators, severities and channel types."""
from enum import Enum


class MetricName(str, Enum):
    # Performance
    RESPONSE_TIME = "responseTime"
    ERROR_RATE = "errorRate"
    THROUGHPUT = "throughput"
    CPU_USAGE = "cpuUsage"
    MEMORY_USAGE = "memoryUsage"
    # Application
    WEBGL_FRAME_RATE = "webglFrameRate"
    AUDIO_LATENCY = "audioLatency"
    EFFECT_SWITCH_TIME = "effectSwitchTime"
    STATE_UPDATE_TIME = "stateUpdateTime"
    # Infrastructure
    DATABASE_CONNECTIONS = "databaseConnections"
    CACHE_HIT_RATE = "cacheHitRate"
    WEBSOCKET_CONNECTIONS = "websocketConnections"
    # Core Web Vitals
    LCP = "lcp"
    FID = "fid"
    CLS = "cls"
    FCP = "fcp"
    TTFB = "ttfb"

    @classmethod
    def is_known(cls, name):
        return name in cls._value2member_map_


class Operator(str, Enum):
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    EQ = "eq"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class ChannelType(str, Enum):
    EMAIL = "email"
    SLACK = "slack"
    WEBHOOK = "webhook"
    SMS = "sms"
