BINARY_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".ico",
    ".svg",
    ".webp",
    ".bmp",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
    ".otf",
    ".zip",
    ".tar",
    ".gz",
    ".pdf",
    ".mp4",
    ".mp3",
    ".mov",
    ".avi",
    ".lock",  # e.g. poetry.lock, Cargo.lock
}


def is_binary_file(file_name: str) -> bool:
    """True for files whose extension marks them as not worth sending for review."""
    _, dot, ext = file_name.rpartition(".")
    if not dot:
        return False
    return f".{ext.lower()}" in BINARY_EXTENSIONS
