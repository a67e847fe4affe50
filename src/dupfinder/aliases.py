from dupfinder.core.hasher import HASH_ALGORITHMS
from dupfinder.core.models import KeepStrategy

KEEP_ALIASES = {
    "newest": KeepStrategy.NEWEST,
    "oldest": KeepStrategy.OLDEST,
    "shortest-path": KeepStrategy.SHORTEST_PATH,
    "shortest": KeepStrategy.SHORTEST_PATH,
}

KEEP_CHOICES = list(KEEP_ALIASES.keys())

KEEP_HELP_TEXT = (
    "Which file to keep in each group:\n"
    "  newest        : Most recently modified file (default)\n"
    "  oldest        : Least recently modified file\n"
    "  shortest-path : File with the shortest full path\n"
    "Overridden by --prefer-folder when given.\n"
)

ALGORITHM_CHOICES = list(HASH_ALGORITHMS.keys())

ALGORITHM_HELP_TEXT = (
    "Content hash algorithm for exact mode:\n"
    "  sha256 : SHA-256 (default)\n"
    "  xxh128 : xxHash3 128-bit (faster, non-cryptographic)\n"
)

EPILOG_TEXT = """
Examples:
  Find exact duplicates in two folders
  %(prog)s -i ~/Downloads ~/Pictures

  Only images bigger than 500KB, verify content byte by byte
  %(prog)s -i ~/Pictures -m 500KB -x jpg png --verify

  Find visually similar images with a stricter threshold
  %(prog)s -i ~/Pictures --similar --threshold 0.1

  Keep files from a folder named "Originals", back up and trash the rest
  %(prog)s -i ~/Pictures --prefer-folder Originals --remove --backup-dir ~/dup-backup

  Same as above without confirmation (for scripts)
  %(prog)s -i ~/Pictures --prefer-folder Originals --remove --force > report.txt
"""
