# admissions/utils.py

"""
Admissions Utility Functions

Contains:
- Lead id generation (per year + course category counters)
- Counter bootstrap from already issued ids
- Status label normalisation
"""

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
import logging
import random
import re
import time

logger = logging.getLogger(__name__)
sequencer_logger = logging.getLogger("admissions.sequencer")

SEQUENCER_DEFAULTS = {
    'LEAD_PREFIX': 'LEAD',
    'DEFAULT_CATEGORY_KEY': 'GEN',
    'PAD_WIDTH': 5,
    'RETRY_ATTEMPTS': 3,
    'RETRY_BACKOFF': 0.05,
    'LOCK_WAIT': 10.0,
}

# Counter-issued suffixes are short; fallback suffixes are timestamp+random.
MAX_SEQUENCE_DIGITS = 9


def sequencer_setting(name):
    return getattr(settings, 'SEQUENCER', {}).get(name, SEQUENCER_DEFAULTS[name])


# =============================================================================
# LEAD ID GENERATION
# =============================================================================

def get_category_key(course_name=None):
    """
    First three letters of the course name, upper-cased.

    Non-alphanumeric characters are ignored; blank names map to the
    default key ("GEN").
    """
    cleaned = re.sub(r'[^A-Za-z0-9]', '', course_name or '')
    if not cleaned:
        return sequencer_setting('DEFAULT_CATEGORY_KEY')
    return cleaned[:3].upper()


def get_counter_key(year, category_key):
    return f"lead-{year}-{category_key}"


def get_id_prefix(year, category_key):
    return f"{sequencer_setting('LEAD_PREFIX')}-{year}-{category_key}-"


def find_highest_sequence(year, category_key):
    """
    Scan existing leads for the highest sequence issued under a prefix.

    Fallback ids (timestamp suffixes) are ignored.
    """
    from admissions.models import Lead

    prefix = get_id_prefix(year, category_key)
    highest = 0
    for lead_id in Lead.objects.filter(lead_id__startswith=prefix).values_list('lead_id', flat=True).iterator():
        suffix = lead_id[len(prefix):]
        if suffix.isdigit() and len(suffix) <= MAX_SEQUENCE_DIGITS:
            highest = max(highest, int(suffix))
    return highest


def bootstrap_counter(year, category_key):
    """
    Create the counter row for (year, category) if missing.

    The initial value is the highest sequence already issued, so a fresh
    deployment never reissues an existing id.

    Returns:
        tuple: (SequenceCounter, created)
    """
    from admissions.models import SequenceCounter

    key = get_counter_key(year, category_key)
    counter = SequenceCounter.objects.filter(key=key).first()
    if counter is not None:
        return counter, False

    highest = find_highest_sequence(year, category_key)
    try:
        with transaction.atomic():
            counter, created = SequenceCounter.objects.get_or_create(
                key=key, defaults={'value': highest}
            )
    except IntegrityError:
        # Another writer created it between our read and insert
        return SequenceCounter.objects.get(key=key), False

    if created:
        sequencer_logger.info(f"Counter {key} initialised at {highest}; next id is {highest + 1}")
    return counter, created


def _increment_counter(key):
    """Atomic increment-and-fetch of one counter row."""
    from admissions.models import SequenceCounter

    with transaction.atomic():
        updated = SequenceCounter.objects.filter(key=key).update(
            value=F('value') + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            raise DatabaseError(f"Sequence counter {key} does not exist")
        return SequenceCounter.objects.filter(key=key).values_list('value', flat=True).get()


def _fallback_suffix():
    return f"{int(time.time() * 1000)}{random.randint(0, 9999):04d}"


def is_lock_contention(error):
    """
    True for errors raised because another writer holds the counter.

    SQLite reports "database is locked" / "database table is locked";
    PostgreSQL aborts one side of a deadlock or serialization conflict.
    """
    message = str(error).lower()
    return any(marker in message for marker in ('is locked', 'deadlock', 'could not serialize'))


def generate_lead_id(course_name=None, year=None):
    """
    Generate the next lead id for a course category.

    Format: LEAD-{year}-{KEY}-{seq:05d}, e.g. LEAD-2025-PCC-00042

    Lock contention with another writer is waited out for up to
    SEQUENCER['LOCK_WAIT'] seconds without using up a retry. Any other
    storage error is retried with exponential backoff. Only when every
    attempt fails is a timestamp+random suffix used instead; those ids are
    outside the counter sequence and are logged for reconciliation.

    Args:
        course_name (str, optional): Interested course name
        year (int, optional): Defaults to the current year

    Returns:
        str: Unique lead id
    """
    year = year or timezone.localdate().year
    category_key = get_category_key(course_name)
    key = get_counter_key(year, category_key)
    prefix = get_id_prefix(year, category_key)

    attempts = max(1, int(sequencer_setting('RETRY_ATTEMPTS')))
    backoff = float(sequencer_setting('RETRY_BACKOFF'))
    pad_width = int(sequencer_setting('PAD_WIDTH'))
    lock_deadline = time.monotonic() + float(sequencer_setting('LOCK_WAIT'))

    failures = 0
    while failures < attempts:
        try:
            # Savepoint keeps an enclosing transaction usable after a failure
            with transaction.atomic():
                bootstrap_counter(year, category_key)
                value = _increment_counter(key)
            return f"{prefix}{value:0{pad_width}d}"
        except DatabaseError as e:
            if is_lock_contention(e) and time.monotonic() < lock_deadline:
                sequencer_logger.debug(f"Counter {key} busy, waiting: {e}")
                time.sleep(random.uniform(0.001, 0.01))
                continue

            failures += 1
            sequencer_logger.warning(
                f"Counter {key} increment failed (attempt {failures}/{attempts}): {e}"
            )
            if failures < attempts:
                time.sleep(backoff * (2 ** (failures - 1)))

    lead_id = f"{prefix}{_fallback_suffix()}"
    sequencer_logger.error(
        f"Counter {key} unavailable after {attempts} attempts; issued fallback id {lead_id}. "
        f"This id is outside the counter sequence and needs manual reconciliation."
    )
    return lead_id


# =============================================================================
# STATUS HELPERS
# =============================================================================

def normalize_status(value):
    """
    Map a status code or display label ('In Follow Up') to its code.

    Returns None for unknown values.
    """
    from admissions.models import Lead

    if not value:
        return None
    text = str(value).strip()
    for code, label in Lead.STATUS_CHOICES:
        if text.upper() == code or text.lower() == label.lower():
            return code
    return None


def normalize_source(value):
    """Map a source code or label ('Meta Lead') to its code; unknown -> OTHERS."""
    from admissions.models import Lead

    text = (value or '').strip()
    for code, label in Lead.SOURCE_CHOICES:
        if text.upper() == code or text.lower() == label.lower():
            return code
    return 'OTHERS'
