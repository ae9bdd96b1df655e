STRICT_HELP_TEXT = (
    "Strict entry matching:\n"
    "  off (default) : archives match when entries, aligned by name, have the same size and CRC\n"
    "  on            : entries must also match by position and full name\n"
)

PATHS_HELP_TEXT = (
    "ZIP files and/or directories to scan (directories are walked recursively).\n"
    "Only archives sharing a directory are compared with each other."
)

EPILOG_TEXT = """
Examples:
  Remove duplicate and contained archives in a backups folder
  %(prog)s ~/Backups

  Same as above, but entries must also match by position and name
  %(prog)s ~/Backups --strict

  Several folders and single files at once, with progress and statistics
  %(prog)s ~/Backups ~/Downloads/site-old.zip ~/Downloads/site-new.zip -v

  Only report errors (for scripts)
  %(prog)s ~/Backups -q

Duplicates are moved to the system trash; the copy with the oldest entries is kept.
Archives whose content is fully contained in another archive of the same folder
are moved into a ".disposed" subfolder next to them. Nothing is deleted permanently.
"""
