"""
Shared constants for the gryffs archiver.

Contains catalog locations, selectors and default configuration values
used across multiple modules.
"""

# Catalog root; every page and static asset URL is derived from it
DEFAULT_BASE_URL = "https://gryffs.com"

# Entity kind used both in static asset URLs and in the archive layout
DEFAULT_ENTITY_KIND = "gryffs"

# Default archive output directory
DEFAULT_ARCHIVE_ROOT = "./archive"

# Default user agent string for all HTTP requests
# Used by both the browser session and the asset downloader
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Default asset request timeout in seconds
DEFAULT_TIMEOUT = 30

# Default page load timeout in milliseconds (for Playwright)
DEFAULT_PAGE_TIMEOUT = 30000

# Default delay between entries in seconds
DEFAULT_ENTRY_DELAY = 0.5

# Partition size of the static image buckets
BUCKET_SIZE = 1000

# Detail page selectors
TITLE_SELECTOR = "h1.page-title"
SEPARATOR_SELECTOR = "div.pageSeparator"
DESCRIPTION_SELECTOR = "#gryffsDesc"
INNER_HTML_SCRIPT = "el => el.innerHTML"
TEXT_BLOCK_SELECTOR = "div"

# Listing and profile selectors
LISTING_LINK_SELECTOR = '#ghfList .ghfGryff a[href*="gryff.php?id="]'
PROFILE_LINK_SELECTOR = '.profileArea .inner a[href*="profile.php?id="]'

# Box selector meaning "all boxes" on the listing page
ALL_BOXES = "-1"

# Archive layout file names
PRIMARY_IMAGE_NAME = "image.png"
THUMBS_DIR_NAME = "thumbs"
MANIFEST_NAME = "info.json"
ERRORS_NAME = "errors.json"
DEFAULT_IMAGE_EXT = ".png"
