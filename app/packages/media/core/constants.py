"""常量定义：上传白名单、大小上限以及 MIME 与扩展名的映射。"""

BEARER_SCHEME = "Bearer"

ALLOWED_IMAGE_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
)

ALLOWED_VIDEO_TYPES = (
    "video/mp4",
    "video/webm",
)

ALLOWED_MIME_TYPES = ALLOWED_IMAGE_TYPES + ALLOWED_VIDEO_TYPES

MAX_IMAGE_SIZE = 5 * 1024 * 1024
MAX_VIDEO_SIZE = 15 * 1024 * 1024

MIME_TO_EXTENSION = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "video/mp4": "mp4",
    "video/webm": "webm",
}

EXTENSION_TO_MIME = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "mp4": "video/mp4",
    "webm": "video/webm",
}

DEFAULT_EXTENSION = "bin"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

THUMBNAIL_EXTENSION = "jpg"
THUMBNAIL_CONTENT_TYPE = "image/jpeg"
THUMBNAIL_SUFFIX = "_thumb"

# 写入对象存储与公开访问时统一附带
IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"

SHORT_HASH_LENGTH = 16
