"""Backup filename classification.

Backup archives are named ``YYYYMMDD-HHMMSS[-<slug>].<tar|sql>.gz``. A file
dated on the first day of a month is a monthly backup, everything else is a
daily backup.
"""

from datetime import datetime
from typing import Optional, Tuple

from .models import BackupTier, ClassifiedName

BACKUP_EXTENSIONS = ('.tar.gz', '.sql.gz')
DATE_FORMAT = '%Y%m%d-%H%M%S'
DATE_TOKEN_LENGTH = len('YYYYMMDD-HHMMSS')


def classify(filename: str) -> Optional[ClassifiedName]:
    """Classify a filename as a backup archive.

    Args:
        filename: Base name of the file.

    Returns:
        ClassifiedName for backup archives, None for anything else. A backup
        archive without a parsable date token is classified as daily with no
        embedded date.
    """
    extension = _backup_extension(filename)
    if extension is None:
        return None

    stem = filename[:-len(extension)]
    embedded_date, slug = _parse_stem(stem)

    if embedded_date is not None and embedded_date.day == 1:
        tier = BackupTier.MONTHLY
    else:
        tier = BackupTier.DAILY

    return ClassifiedName(
        filename=filename,
        extension=extension.split('.')[1],
        tier=tier,
        embedded_date=embedded_date,
        slug=slug
    )


def _backup_extension(filename: str) -> Optional[str]:
    for extension in BACKUP_EXTENSIONS:
        if filename.endswith(extension) and len(filename) > len(extension):
            return extension
    return None


def _parse_stem(stem: str) -> Tuple[Optional[datetime], Optional[str]]:
    """Split a stem into its date token and slug, failing closed."""
    token, rest = stem[:DATE_TOKEN_LENGTH], stem[DATE_TOKEN_LENGTH:]

    # strptime alone accepts single-digit fields
    if len(token) != DATE_TOKEN_LENGTH or not (token[:8].isdigit() and token[9:].isdigit()):
        return None, None

    try:
        embedded_date = datetime.strptime(token, DATE_FORMAT)
    except ValueError:
        return None, None

    if not rest:
        return embedded_date, None
    if rest.startswith('-') and len(rest) > 1:
        return embedded_date, rest[1:]
    return None, None
