"""
Tests for the certification record service.

Tests cover payload sanitizing, CRUD operations, required-field validation
and the distinct-category lookup.
"""

import pytest
from datetime import date

from backend.models.schema import AccountCertification
from services.certification_service import (
    CertificationService, parse_iso_date, sanitize_payload, summarize_records
)
from services.exceptions import RecordNotFoundError, ValidationError


def make_payload(account, **overrides):
    payload = {
        'account_id': account.id,
        'entry_date': '2026-10-01',
        'cert_type': 'K3 Umum',
        'cert_name': 'Ahli K3 Umum',
        'cert_date': '2026-09-15',
        'file_id': '',
        'notes': ''
    }
    payload.update(overrides)
    return payload


class TestSanitizePayload:
    """Test blank-to-null normalization."""

    def test_blanks_become_none(self):
        result = sanitize_payload({'a': '', 'b': None, 'c': 'x'})
        assert result == {'a': None, 'b': None, 'c': 'x'}

    def test_other_values_untouched(self):
        result = sanitize_payload({'zero': 0, 'flag': False, 'space': ' ', 'day': date(2024, 1, 2)})
        assert result == {'zero': 0, 'flag': False, 'space': ' ', 'day': date(2024, 1, 2)}


class TestCreate:
    """Test record creation."""

    def test_create_stores_record(self, session, accounts):
        service = CertificationService(session)

        record = service.create(make_payload(accounts[0]))

        assert record.id
        assert record.account_id == accounts[0].id
        assert record.cert_date == date(2026, 9, 15)
        assert record.entry_date == date(2026, 10, 1)
        assert record.file_id is None
        assert record.notes is None
        assert session.query(AccountCertification).count() == 1

    def test_absent_optional_fields_stored_as_null(self, session, accounts):
        service = CertificationService(session)

        record = service.create({
            'account_id': accounts[0].id,
            'cert_type': 'ISO',
            'cert_name': 'ISO 9001 Auditor',
            'cert_date': '2025-01-20'
        })

        assert record.entry_date is None
        assert record.file_id is None

    def test_missing_required_fields_raise_before_store(self, session, accounts):
        service = CertificationService(session)

        with pytest.raises(ValidationError) as exc_info:
            service.create(make_payload(accounts[0], cert_type='', cert_name=None))

        assert exc_info.value.fields == ['cert_type', 'cert_name']
        assert session.query(AccountCertification).count() == 0

    def test_invalid_date_rejected(self, session, accounts):
        service = CertificationService(session)

        with pytest.raises(ValidationError) as exc_info:
            service.create(make_payload(accounts[0], cert_date='15/09/2026'))

        assert exc_info.value.fields == ['cert_date']
        assert 'YYYY-MM-DD' in exc_info.value.reason

    def test_unknown_fields_ignored(self, session, accounts):
        service = CertificationService(session)

        record = service.create(make_payload(accounts[0], full_name='Should not matter'))

        assert record.cert_name == 'Ahli K3 Umum'


class TestUpdateAndDelete:
    """Test partial updates, file attachment and deletion."""

    def test_update_only_supplied_fields(self, session, accounts):
        service = CertificationService(session)
        record = service.create(make_payload(accounts[0], notes='first'))

        updated = service.update(record.id, {'cert_name': 'Ahli K3 Listrik'})

        assert updated.cert_name == 'Ahli K3 Listrik'
        assert updated.notes == 'first'
        assert updated.cert_type == 'K3 Umum'

    def test_update_blank_optional_field_clears_it(self, session, accounts):
        service = CertificationService(session)
        record = service.create(make_payload(accounts[0], notes='first'))

        updated = service.update(record.id, {'notes': ''})

        assert updated.notes is None

    def test_update_cannot_clear_required_field(self, session, accounts):
        service = CertificationService(session)
        record = service.create(make_payload(accounts[0]))

        with pytest.raises(ValidationError):
            service.update(record.id, {'cert_type': ''})

        assert service.get(record.id).cert_type == 'K3 Umum'

    def test_update_missing_record(self, session):
        with pytest.raises(RecordNotFoundError):
            CertificationService(session).update('missing-id', {'notes': 'x'})

    def test_attach_file(self, session, accounts):
        service = CertificationService(session)
        record = service.create(make_payload(accounts[0]))

        updated = service.attach_file(record.id, 'drive-file-id')

        assert updated.file_id == 'drive-file-id'

    def test_delete(self, session, accounts):
        service = CertificationService(session)
        record = service.create(make_payload(accounts[0]))

        assert service.delete(record.id) is True

        with pytest.raises(RecordNotFoundError):
            service.get(record.id)

    def test_delete_missing_record(self, session):
        with pytest.raises(RecordNotFoundError):
            CertificationService(session).delete('missing-id')


class TestQueries:
    """Test list ordering, joins and the category lookup."""

    def test_list_all_newest_entry_first_with_account(self, session, accounts):
        service = CertificationService(session)
        service.create(make_payload(accounts[0], entry_date='2026-01-05', cert_name='Old'))
        service.create(make_payload(accounts[1], entry_date='2026-10-05', cert_name='New'))

        records = service.list_all()

        assert [r.cert_name for r in records] == ['New', 'Old']
        assert records[0].account.full_name == 'Siti Rahmawati'

    def test_list_for_account_most_recent_certification_first(self, session, accounts):
        service = CertificationService(session)
        service.create(make_payload(accounts[0], cert_date='2020-01-01', cert_name='A'))
        service.create(make_payload(accounts[0], cert_date='2024-01-01', cert_name='B'))
        service.create(make_payload(accounts[1], cert_name='Other'))

        records = service.list_for_account(accounts[0].id)

        assert [r.cert_name for r in records] == ['B', 'A']

    def test_distinct_types_sorted_without_duplicates_or_blanks(self, session, accounts):
        service = CertificationService(session)
        for cert_type in ['SMK3', 'ISO', 'SMK3', 'Ahli K3']:
            service.create(make_payload(accounts[0], cert_type=cert_type))
        session.add(AccountCertification(
            account_id=accounts[0].id, cert_type='', cert_name='Legacy', cert_date=date(2020, 1, 1)
        ))
        session.commit()

        assert service.list_distinct_types() == ['Ahli K3', 'ISO', 'SMK3']

    def test_distinct_types_empty_store(self, session):
        assert CertificationService(session).list_distinct_types() == []


class TestSummary:
    """Test dashboard counters."""

    def test_counts_total_and_this_month(self):
        records = [
            AccountCertification(entry_date=date(2026, 10, 1)),
            AccountCertification(entry_date=date(2026, 10, 16)),
            AccountCertification(entry_date=date(2025, 10, 16)),
            AccountCertification(entry_date=None),
        ]

        summary = summarize_records(records, today=date(2026, 10, 16))

        assert summary == {'total': 4, 'this_month': 2}


class TestParseIsoDate:
    """Test strict ISO date parsing."""

    @pytest.mark.parametrize('text, expected', [
        ('2024-01-01', date(2024, 1, 1)),
        (' 2024-01-01 ', date(2024, 1, 1)),
        ('2024-01-01T10:30:00', date(2024, 1, 1)),
        ('2024-01-01T10:30:00.123Z', date(2024, 1, 1)),
        ('2024-01-01T10:30:00+07:00', date(2024, 1, 1)),
    ])
    def test_accepted(self, text, expected):
        assert parse_iso_date(text) == expected

    @pytest.mark.parametrize('text', [
        '2024-01-01junk', '2024-01-01 trailing', '2024-01-01Tnoon',
        '01/02/2024', '2024-13-01', '2024-1-1', '',
    ])
    def test_rejected(self, text):
        assert parse_iso_date(text) is None

    def test_create_rejects_trailing_junk(self, session, accounts):
        service = CertificationService(session)

        with pytest.raises(ValidationError) as exc_info:
            service.create(make_payload(accounts[0], cert_date='2024-01-01junk'))

        assert exc_info.value.fields == ['cert_date']
        assert session.query(AccountCertification).count() == 0

    def test_create_accepts_timestamp(self, session, accounts):
        record = CertificationService(session).create(
            make_payload(accounts[0], cert_date='2024-01-01T08:00:00')
        )

        assert record.cert_date == date(2024, 1, 1)
