"""
Lead id generation: sequential issue, bootstrap from existing ids,
retry with backoff, waiting out lock contention and the timestamp
fallback.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.db import DatabaseError, OperationalError, connection

from admissions.models import Lead, SequenceCounter
from admissions.utils import (
    bootstrap_counter, find_highest_sequence, generate_lead_id,
    get_category_key, is_lock_contention, normalize_source, normalize_status,
)


@pytest.fixture
def sequencer_settings(settings):
    settings.SEQUENCER = {
        'LEAD_PREFIX': 'LEAD',
        'DEFAULT_CATEGORY_KEY': 'GEN',
        'PAD_WIDTH': 5,
        'RETRY_ATTEMPTS': 3,
        'RETRY_BACKOFF': 0.01,
        'LOCK_WAIT': 5.0,
    }
    return settings


class TestCategoryKey:

    @pytest.mark.parametrize('course_name, expected', [
        ('Professional Cloud Computing', 'PRO'),
        ('python', 'PYT'),
        ('C#', 'C'),
        ('  A.I. Basics', 'AIB'),
        ('', 'GEN'),
        (None, 'GEN'),
        ('!!!', 'GEN'),
    ])
    def test_category_key(self, course_name, expected):
        assert get_category_key(course_name) == expected


@pytest.mark.django_db
class TestGenerateLeadId:

    def test_ids_are_sequential_per_category(self, sequencer_settings):
        first = generate_lead_id('Professional Cloud Computing', year=2025)
        second = generate_lead_id('Professional Cloud Computing', year=2025)
        other = generate_lead_id('Graphic Design', year=2025)

        assert first == 'LEAD-2025-PRO-00001'
        assert second == 'LEAD-2025-PRO-00002'
        assert other == 'LEAD-2025-GRA-00001'

    def test_years_have_separate_counters(self, sequencer_settings):
        generate_lead_id('Python', year=2024)
        assert generate_lead_id('Python', year=2025) == 'LEAD-2025-PYT-00001'
        assert SequenceCounter.objects.filter(key__startswith='lead-').count() == 2

    def test_missing_course_uses_default_key(self, sequencer_settings):
        assert generate_lead_id(None, year=2025) == 'LEAD-2025-GEN-00001'

    def test_counter_bootstraps_from_existing_ids(self, sequencer_settings):
        Lead.objects.create(lead_id='LEAD-2025-PRO-00041', name='Existing')
        Lead.objects.create(lead_id='LEAD-2025-PRO-00007', name='Older')
        # Fallback ids are outside the sequence and must not be used as a base
        Lead.objects.create(lead_id='LEAD-2025-PRO-17356890123454321', name='Fallback')

        assert find_highest_sequence(2025, 'PRO') == 41
        assert generate_lead_id('Professional Cloud Computing', year=2025) == 'LEAD-2025-PRO-00042'

    def test_bootstrap_is_idempotent(self, sequencer_settings):
        Lead.objects.create(lead_id='LEAD-2025-PRO-00005', name='Existing')

        counter, created = bootstrap_counter(2025, 'PRO')
        assert created
        assert counter.value == 5

        counter, created = bootstrap_counter(2025, 'PRO')
        assert not created
        assert counter.value == 5

    def test_transient_failure_is_retried(self, sequencer_settings):
        with patch('admissions.utils._increment_counter', side_effect=[DatabaseError('disk I/O error'), 7]), \
                patch('admissions.utils.time.sleep') as sleep:
            lead_id = generate_lead_id('Python', year=2025)

        assert lead_id == 'LEAD-2025-PYT-00007'
        sleep.assert_called_once_with(0.01)

    def test_lock_contention_is_waited_out(self, sequencer_settings, caplog):
        busy = [OperationalError('database table is locked')] * 4
        with patch('admissions.utils._increment_counter', side_effect=busy + [12]), \
                patch('admissions.utils.time.sleep') as sleep, \
                caplog.at_level(logging.WARNING, logger='admissions.sequencer'):
            lead_id = generate_lead_id('Python', year=2025)

        assert lead_id == 'LEAD-2025-PYT-00012'
        assert sleep.call_count == 4
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_contention_beyond_lock_wait_counts_as_failure(self, sequencer_settings, caplog):
        sequencer_settings.SEQUENCER = {**sequencer_settings.SEQUENCER, 'LOCK_WAIT': 0}
        with patch('admissions.utils._increment_counter', side_effect=OperationalError('database is locked')), \
                patch('admissions.utils.time.sleep'), \
                caplog.at_level(logging.WARNING, logger='admissions.sequencer'):
            lead_id = generate_lead_id('Python', year=2025)

        assert re.fullmatch(r'LEAD-2025-PYT-\d{17}', lead_id)
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3

    @pytest.mark.parametrize('message, expected', [
        ('database is locked', True),
        ('database table is locked: admissions_sequencecounter', True),
        ('deadlock detected', True),
        ('could not serialize access due to concurrent update', True),
        ('disk I/O error', False),
    ])
    def test_lock_contention_detection(self, message, expected):
        assert is_lock_contention(OperationalError(message)) is expected

    def test_fallback_after_all_attempts_fail(self, sequencer_settings, caplog):
        with patch('admissions.utils._increment_counter', side_effect=DatabaseError('down')), \
                patch('admissions.utils.time.sleep') as sleep, \
                caplog.at_level(logging.WARNING, logger='admissions.sequencer'):
            lead_id = generate_lead_id('Python', year=2025)

        assert re.fullmatch(r'LEAD-2025-PYT-\d{17}', lead_id)
        # Backoff doubles between attempts
        assert [c.args[0] for c in sleep.call_args_list] == [0.01, 0.02]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert lead_id in errors[0].getMessage()


@pytest.mark.django_db(transaction=True)
def test_concurrent_generation_stays_sequential(sequencer_settings, caplog):
    generate_lead_id('Python', year=2025)

    def issue(_):
        try:
            return generate_lead_id('Python', year=2025)
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(issue, range(40)))

    assert sorted(ids) == [f'LEAD-2025-PYT-{n:05d}' for n in range(2, 42)]
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


@pytest.mark.django_db
class TestBootstrapCommand:

    def test_creates_counters_from_issued_ids(self, sequencer_settings):
        Lead.objects.create(lead_id='LEAD-2025-PRO-00012', name='A')
        Lead.objects.create(lead_id='LEAD-2025-GRA-00003', name='B')

        call_command('bootstrap_lead_sequences', '--year', '2025')

        assert SequenceCounter.objects.get(key='lead-2025-PRO').value == 12
        assert SequenceCounter.objects.get(key='lead-2025-GRA').value == 3

    def test_repair_raises_lagging_counter(self, sequencer_settings):
        SequenceCounter.objects.create(key='lead-2025-PRO', value=2)
        Lead.objects.create(lead_id='LEAD-2025-PRO-00009', name='A')

        call_command('bootstrap_lead_sequences', '--year', '2025')
        assert SequenceCounter.objects.get(key='lead-2025-PRO').value == 2

        call_command('bootstrap_lead_sequences', '--year', '2025', '--repair')
        assert SequenceCounter.objects.get(key='lead-2025-PRO').value == 9


class TestNormalisation:

    @pytest.mark.parametrize('value, expected', [
        ('COUNSELING', 'COUNSELING'),
        ('In Follow Up', 'IN_FOLLOW_UP'),
        ('not admitted', 'NOT_ADMITTED'),
        ('bogus', None),
        ('', None),
    ])
    def test_normalize_status(self, value, expected):
        assert normalize_status(value) == expected

    @pytest.mark.parametrize('value, expected', [
        ('Meta Lead', 'META'),
        ('LINKEDIN', 'LINKEDIN'),
        ('Newspaper', 'OTHERS'),
        (None, 'OTHERS'),
    ])
    def test_normalize_source(self, value, expected):
        assert normalize_source(value) == expected
