"""Constants used throughout the application."""

# Model names
MODELS = {
    "GLM_4V_FLASH": "glm-4v-flash",
    "GLM_4V_PLUS": "glm-4v-plus",
    "GEMINI_2_0_FLASH": "gemini-2.0-flash",
    "GEMINI_1_5_FLASH": "gemini-1.5-flash",
}

# Default model
DEFAULT_MODEL = MODELS["GLM_4V_FLASH"]

# Model names starting with this prefix are served by the chat-completions API
GLM_MODEL_PREFIX = "glm"

# Default chat-completions endpoint
DEFAULT_GLM_ENDPOINT = "https://open.bigmodel.cn/api/paas/v4/chat/completions"

# Environment variable names
ENV_API_KEY = "IMAGE_RENAME_API_KEY"
ENV_BASE_URL = "IMAGE_RENAME_BASE_URL"
ENV_MODEL = "IMAGE_RENAME_MODEL"
ENV_LANGUAGE = "IMAGE_RENAME_LANGUAGE"
ENV_OFFLINE = "IMAGE_RENAME_OFFLINE"

# Default values
DEFAULT_CONFIG_FILE = "config.yaml"
DEFAULT_LANGUAGE = "zh"
DEFAULT_IMAGE_QUALITY = 90
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 100

# Supported image formats
SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".webp")

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".webp": "image/webp",
}
DEFAULT_MIME_TYPE = "image/jpeg"

# Filename limits
MAX_FILENAME_LENGTH_EN = 50
MAX_FILENAME_LENGTH_ZH = 30
MIN_REUSABLE_STEM_LENGTH = 3

# Offline naming
GENERIC_STEM_TOKENS = ("screenshot", "image", "photo", "img", "pic")

SIZE_BUCKETS_MB = (0.5, 2.0, 5.0)
SIZE_LABELS_EN = ("small", "medium", "large", "xlarge")
SIZE_LABELS_ZH = ("小", "中", "大", "超大")

OFFLINE_SUFFIX_EN = "image"
OFFLINE_SUFFIX_ZH = "图像"

# Date formats
DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

# Skip reasons
REASON_NAME_UNCHANGED = "name unchanged"
REASON_TARGET_EXISTS = "target already exists"
