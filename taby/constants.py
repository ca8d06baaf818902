"""
Constants for Taby.

Most of these are defaults; the ones that matter to users are also available
via the config system.
"""

# Gist providers
GITHUB_API = "https://api.github.com"
GITEE_API = "https://gitee.com/api/v5"
GIST_PROVIDERS = {
    "github": GITHUB_API,
    "gitee": GITEE_API,
}
GITHUB_API_VERSION = "2022-11-28"

# Names of the compressed blobs inside the gist
SNAPSHOT_FILES = ("spaces", "collections", "labels", "cards", "favicons")

# Cache
CACHE_KEY_PREFIX = "taby_data_cache"
DEFAULT_CACHE_DURATION = 60 * 60  # seconds
SELECTED_SPACE_KEY = "selectedSpace"
STORAGE_FILENAME = "storage.json"

# Network timeouts (in seconds)
DEFAULT_REQUEST_TIMEOUT = 10

# Favicon services
ICON_PROXY_URL = "https://wsrv.nl/?url={url}&page=-1&default=1"
FALLBACK_FAVICON_URL = "https://www.google.com/s2/favicons?domain={domain}&sz=32"
BROWSER_INTERNAL_PREFIXES = (
    "chrome://",
    "chrome-extension://",
    "edge://",
    "brave://",
    "vivaldi://",
    "opera://",
    "about:",
)

# Search
SEARCH_KEYS = ("title", "description", "url", "title_phonetic", "description_phonetic")
DEFAULT_SEARCH_THRESHOLD = 0.3
