"""
Fixed name lists used during traversal and admission.
"""

from __future__ import annotations

# Never entered during traversal.
VCS_DIRS: frozenset[str] = frozenset({".git", ".hg", ".svn"})

NODE_MODULES_DIR = "node_modules"

BUILD_DIRS: frozenset[str] = frozenset({"target", "build", "dist"})

# Rejected by extension alone, without reading the file.
BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        # Images
        "png",
        "jpg",
        "jpeg",
        "gif",
        "ico",
        "webp",
        "svg",
        "bmp",
        "tiff",
        "tif",
        # Video
        "mp4",
        "avi",
        "mov",
        "wmv",
        "flv",
        "webm",
        "mkv",
        # Audio
        "mp3",
        "wav",
        "ogg",
        # Archives
        "zip",
        "tar",
        "gz",
        "bz2",
        "7z",
        "rar",
        # Documents
        "pdf",
        "doc",
        "docx",
        "xls",
        "xlsx",
        # Executables and libraries
        "exe",
        "dll",
        "so",
        "dylib",
        # Fonts
        "woff",
        "woff2",
        "ttf",
        "eot",
    }
)

SNIFF_BYTES = 1024

# WordPress core directories pruned from traversal when the wordpress profile is active.
WORDPRESS_CORE_DIRS: frozenset[str] = frozenset({"wp-admin", "wp-includes"})

# WordPress core entry points that add nothing to a site's own code.
WORDPRESS_CORE_FILES: frozenset[str] = frozenset(
    {
        "xmlrpc.php",
        "wp-activate.php",
        "wp-cron.php",
        "wp-load.php",
        "wp-blog-header.php",
        "wp-settings.php",
        "wp-login.php",
        "wp-signup.php",
        "wp-trackback.php",
        "wp-comments-post.php",
        "wp-links-opml.php",
        "wp-mail.php",
    }
)
