"""Centralized constants for the visitor tracker."""


# ===== DEDUPLICATION =====
class TrackingConstants:
    DEFAULT_WINDOW_SECONDS = 1800  # 30 minutes
    DEFAULT_MAX_ENTRIES = 10000
    DEFAULT_RETENTION_SECONDS = 86400
    DYNAMODB_KEY_PREFIX = "VISITOR#"


# ===== OUTBOUND HTTP =====
class HttpConstants:
    DEFAULT_TIMEOUT_SECONDS = 5.0
    SUCCESS_MIN = 200
    SUCCESS_MAX = 299


# ===== GEOLOCATION =====
class GeoConstants:
    PRIMARY_PROVIDER = "ip-api.com"
    BACKUP_PROVIDER = "ipapi.co"
    PRIMARY_URL = "http://ip-api.com/json/{ip}"
    PRIMARY_FIELDS = (
        "status,message,continent,continentCode,country,countryCode,region,"
        "regionName,city,district,zip,lat,lon,timezone,offset,currency,isp,"
        "org,as,asname,mobile,proxy,hosting,query"
    )
    BACKUP_URL = "https://ipapi.co/{ip}/json/"
    IPV4_MAPPED_PREFIX = "::ffff:"
    PRIVATE_NETWORKS = ("10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16", "fc00::/7")
    UNKNOWN = "Unknown"
    UNKNOWN_COUNTRY = "🌍 Unknown Location"
    LOCAL_COUNTRY = "🏠 Local/Private"
    LOCAL_CITY = "Local Network"
    LOCAL_ISP = "Private Network"
    ALL_PROVIDERS_FAILED = "All geolocation services failed"
    INVALID_ADDRESS = "Invalid client address"
    DEFAULT_FLAG = "🌍"


# ===== SESSION ANALYSIS =====
class SessionConstants:
    FINGERPRINT_LENGTH = 16
    VISITOR_HASH_LENGTH = 12
    TRUST_BASELINE = 50
    TRUST_HIGH_THRESHOLD = 80
    TRUST_MEDIUM_THRESHOLD = 60
    NEW_SESSION = "New Session"
    RETURNING_SESSION = "Returning Session"


# ===== REQUEST EXTRACTION =====
class RequestConstants:
    CLIENT_IP_HEADERS = (
        "x-forwarded-for",
        "x-real-ip",
        "cf-connecting-ip",
        "x-client-ip",
    )
    UNKNOWN_IP = "Unknown"
    UNKNOWN_USER_AGENT = "Unknown User Agent"
    DIRECT_VISIT = "Direct Visit"
    REQUEST_ID_PREFIX = "VT"


# ===== NOTIFICATIONS =====
class NotificationConstants:
    TRACKER_NAME = "Advanced Visitor Tracker"
    TRACKER_VERSION = "v2.0"
    AVATAR_URL = "https://cdn.jsdelivr.net/gh/twitter/twemoji@14.0.2/assets/72x72/1f4e1.png"
    THUMBNAIL_URL = "https://cdn.jsdelivr.net/gh/twitter/twemoji@14.0.2/assets/72x72/1f310.png"
    TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"
    DATASTORE_PATH = "/api/visitors"
    DISCORD_USER_AGENT_LIMIT = 100
    TELEGRAM_USER_AGENT_LIMIT = 80


# ===== MONITORING =====
class MonitoringConstants:
    DEFAULT_NAMESPACE = "VisitorTracker"
    DEFAULT_BATCH_SIZE = 20
    PUBLISH_QUEUE_SIZE = 100
    QUEUE_GET_TIMEOUT = 1.0
    SHUTDOWN_TIMEOUT_SECONDS = 5.0
