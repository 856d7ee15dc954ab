"""Constants shared across the attachment migrator."""

# HTTP status codes
HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300

# Configuration defaults
DEFAULT_BUCKET_NAME = "app_private"
DEFAULT_BATCH_SIZE = 10
DEFAULT_ATTACHMENTS_TABLE = "clinical_attachments"
DEFAULT_REQUEST_TIMEOUT = 60.0
DEFAULT_ENV_FILE = ".env"
DEFAULT_LOG_DIR = "migration_logs"

# Legacy folders searched, in order, for files missing from production
LEGACY_FILES_PREFIX = "files"
LEGACY_CONSENT_FORMS_PREFIX = "consent_forms"
LEGACY_PREFIXES = (LEGACY_FILES_PREFIX, LEGACY_CONSENT_FORMS_PREFIX)

# PostgREST
METADATA_PAGE_SIZE = 1000
# Primary key the metadata pages are ordered by
ATTACHMENTS_ORDER_COLUMN = "id"
STORAGE_SCHEMA = "storage"
STORAGE_OBJECTS_TABLE = "objects"

KEY_SEPARATOR = "/"

LOGGER_NAME = "attachment_migrator"
REPORT_FILENAME = "migration_report.yaml"
