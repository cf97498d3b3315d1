"""Default exclusion rules and limits for workspace search."""

# Directory and file globs never enumerated
EXCLUDE_PATTERNS = (
    "**/node_modules/**",
    "**/.git/**",
    "**/.svn/**",
    "**/.hg/**",
    "**/dist/**",
    "**/build/**",
    "**/out/**",
    "**/coverage/**",
    "**/.next/**",
    "**/.venv/**",
    "**/venv/**",
    "**/__pycache__/**",
    "**/.pytest_cache/**",
    "**/.mypy_cache/**",
    "**/.idea/**",
    "**/.vscode/**",
    "**/*.min.js",
    "**/*.map",
)

# Extensions without the leading dot, compared lowercase
BINARY_EXTENSIONS = frozenset(
    {
        # Images
        "png", "jpg", "jpeg", "gif", "bmp", "ico", "webp", "tiff", "psd",
        # Audio/video
        "mp3", "mp4", "wav", "avi", "mov", "mkv", "flac", "ogg", "webm",
        # Archives
        "zip", "tar", "gz", "bz2", "xz", "7z", "rar", "jar", "war", "whl",
        # Compiled/object files
        "exe", "dll", "so", "dylib", "o", "a", "lib", "bin", "class", "pyc", "pyo", "wasm",
        # Documents
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
        # Fonts
        "woff", "woff2", "ttf", "otf", "eot",
        # Data files
        "db", "sqlite", "sqlite3", "pickle", "pkl", "npy", "npz", "onnx", "pt", "pth",
        "safetensors",
    }
)

INCLUDE_GLOB = "**/*"

DEFAULT_MAX_RESULTS = 100
DEFAULT_MAX_MATCHES_PER_FILE = 100
DEFAULT_MAX_FILES_TO_SEARCH = 1000
DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_BATCH_SIZE = 50

ENUMERATION_LIMIT = 1000
ENUMERATION_TIMEOUT_SECONDS = 1.0

DEBOUNCE_SECONDS = 0.075

# Open search panels held by one front end
MAX_SESSIONS = 64
