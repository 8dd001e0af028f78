"""Constants used throughout SnapVCS."""

# Directory names
SNAPVCS_DIR = ".snapvcs"
OBJECTS_DIR = "objects"
COMMITS_DIR = "commits"

# File names
HEAD_FILE = "HEAD"
DEFAULT_BRANCH = "master"
HEAD_CONTENT = f"ref: refs/heads/{DEFAULT_BRANCH}\n"

# Environment variable overriding the repository root
ROOT_ENV_VAR = "SNAPVCS_DIR"

# Hash algorithm
HASH_ALGORITHM = "sha1"
HASH_LENGTH = 40  # SHA-1 produces 40 hex characters

# Commit identities: UTC wall-clock time, second resolution
COMMIT_ID_FORMAT = "%Y-%m-%dT%H-%M-%S"
# Suffix appended when two commits land in the same second, e.g. ".001"
COMMIT_ID_SUFFIX_WIDTH = 3

# Temp file prefix for atomic writes (never a valid object id)
TMP_PREFIX = ".tmp_"

# Exit codes
EXIT_USER_ERROR = 1
