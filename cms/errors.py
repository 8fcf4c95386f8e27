"""
Typed failures raised by the cms services.

Each error carries the HTTP status and stable ``code`` the API returns for
it, so views and the DRF exception handler never inspect message text.
Database failures are classified into these kinds once, at the store
boundary (``cms.services.store``).
"""
from __future__ import annotations

from typing import Optional


class CmsError(Exception):
    status_code = 500
    code = 'cms_error'

    def __init__(self, message: str = '', **detail):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.detail = detail

    def as_payload(self) -> dict:
        return {'code': self.code, 'message': self.message}


class TransportError(CmsError):
    """The data store could not be reached or rejected the operation."""
    status_code = 503
    code = 'store_unavailable'


class SchemaFieldMissing(CmsError):
    """An expected column (usually ``order``) or table does not exist."""
    status_code = 409
    code = 'schema_field_missing'

    def __init__(self, table: str, field: Optional[str] = 'order', message: str = ''):
        if not message:
            message = (f'column "{field}" is missing on table "{table}"' if field
                       else f'table "{table}" does not exist')
        super().__init__(message)
        self.table = table
        self.field = field

    @property
    def setup(self) -> str:
        if not self.field:
            return (
                f'The table "{self.table}" does not exist. '
                'Apply the database migrations with "python manage.py migrate cms".'
            )
        return (
            f'The "{self.field}" column is not present on "{self.table}". '
            'Apply the database migrations with "python manage.py migrate cms", '
            f'or add it manually: ALTER TABLE "{self.table}" ADD COLUMN "{self.field}" bigint NULL;'
        )

    def as_payload(self) -> dict:
        payload = super().as_payload()
        payload['setup'] = self.setup
        return payload


class RecordNotFound(CmsError):
    status_code = 404
    code = 'record_not_found'

    def __init__(self, table: str, pk: Optional[str] = None, message: str = ''):
        super().__init__(message or f'{table} record {pk} not found')
        self.table = table
        self.pk = pk


class MoveRejected(CmsError):
    """A move that cannot happen (first item up, last item down, bad index)."""
    status_code = 400
    code = 'move_rejected'


class MoveInProgress(CmsError):
    status_code = 409
    code = 'move_in_progress'


class ConcurrentUpdate(CmsError):
    """An order value changed between reading it and swapping it."""
    status_code = 409
    code = 'concurrent_update'


class UploadRejected(CmsError):
    status_code = 400
    code = 'upload_rejected'


class SyncError(CmsError):
    """The external blog API answered with an error or did not answer."""
    status_code = 502
    code = 'sync_failed'
