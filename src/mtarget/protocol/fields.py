"""Delivery API vocabulary.

Keep the JSON key names in one place to avoid stringly-typed handling
scattered across the builder and the parser.
"""

# Top-level request/response nodes

ID = "id"
CONTEXT = "context"
EXPERIENCE_CLOUD = "experienceCloud"
ENVIRONMENT_ID = "environmentId"
PROPERTY = "property"
TOKEN = "token"
EXECUTE = "execute"
PREFETCH = "prefetch"
NOTIFICATIONS = "notifications"
MBOXES = "mboxes"
MESSAGE = "message"
REQUEST_ID = "requestId"
CLIENT = "client"
EDGE_HOST = "edgeHost"

# id node

TNT_ID = "tntId"
THIRD_PARTY_ID = "thirdPartyId"
MARKETING_CLOUD_VISITOR_ID = "marketingCloudVisitorId"
CUSTOMER_IDS = "customerIds"
INTEGRATION_CODE = "integrationCode"
AUTHENTICATED_STATE = "authenticatedState"

AUTHENTICATED = "authenticated"
LOGGED_OUT = "logged_out"
UNKNOWN = "unknown"

# context node

CHANNEL = "channel"
CHANNEL_MOBILE = "mobile"
MOBILE_PLATFORM = "mobilePlatform"
PLATFORM_TYPE = "platformType"
DEVICE_NAME = "deviceName"
DEVICE_TYPE = "deviceType"
APPLICATION = "application"
APPLICATION_NAME = "name"
APPLICATION_VERSION = "version"
SCREEN = "screen"
WIDTH = "width"
HEIGHT = "height"
COLOR_DEPTH = "colorDepth"
ORIENTATION = "orientation"
USER_AGENT = "userAgent"
TIME_OFFSET = "timeOffsetInMinutes"

DEFAULT_COLOR_DEPTH = 32

# experienceCloud node

ANALYTICS = "analytics"
LOGGING = "logging"
LOGGING_CLIENT_SIDE = "client_side"
AUDIENCE_MANAGER = "audienceManager"
BLOB = "blob"
LOCATION_HINT = "locationHint"

# mbox node

INDEX = "index"
NAME = "name"
STATE = "state"
PARAMETERS = "parameters"
PROFILE_PARAMETERS = "profileParameters"
ORDER = "order"
PRODUCT = "product"
TOTAL = "total"
PURCHASED_PRODUCT_IDS = "purchasedProductIds"
CATEGORY_ID = "categoryId"

AT_PROPERTY = "at_property"

# response mbox node

OPTIONS = "options"
METRICS = "metrics"
CONTENT = "content"
TYPE = "type"
EVENT_TOKEN = "eventToken"
RESPONSE_TOKENS = "responseTokens"
PAYLOAD = "payload"

TYPE_HTML = "html"
TYPE_JSON = "json"

# Only these keys are retained when a prefetched mbox is cached.

CACHED_MBOX_ACCEPTED_KEYS = (NAME, STATE, OPTIONS, ANALYTICS, METRICS)

# notification node

MBOX = "mbox"
TIMESTAMP = "timestamp"
TOKENS = "tokens"
DISPLAY = "display"
CLICK = "click"

# data handed to a content-with-data callback

DATA_RESPONSE_TOKENS = "responseTokens"
DATA_ANALYTICS_PAYLOAD = "analytics.payload"
DATA_CLICK_ANALYTICS_PAYLOAD = "clickmetric.analytics.payload"

A4T_SESSION_ID = "a.target.sessionId"
A4T_PREFIX = "&&"


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
