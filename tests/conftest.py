import os
from dataclasses import replace

import pytest

from geoplaces.errors import NotFound
from geoplaces.proximity import WithinDistance
from geoplaces.statements import NameMatch, require_srid


class FakeStore:
    """In-memory stand-in for RecordStore used by the HTTP and demo tests."""

    srid = 4326

    def __init__(self):
        self.records = {}
        self.next_id = 1
        self.requests = []

    def ensure_schema(self):
        pass

    def drop_schema(self):
        self.records.clear()
        self.next_id = 1

    def insert_many(self, records):
        records = list(records)
        for r in records:
            if r.location is not None:
                require_srid(r.location, self.srid)
        inserted = []
        for r in records:
            record = replace(r, id=self.next_id)
            self.records[record.id] = record
            self.next_id += 1
            inserted.append(record)
        return inserted

    def list_all(self):
        return [self.records[i] for i in sorted(self.records)]

    def get(self, record_id):
        if record_id not in self.records:
            raise NotFound(record_id)
        return self.records[record_id]

    def find_by_name(self, name):
        matches = self.query(NameMatch(name))
        return matches[0] if matches else None

    def search_name(self, fragment):
        return self.query(NameMatch(fragment, exact=False))

    def update_one(self, record_id, new_location):
        require_srid(new_location, self.srid)
        record = replace(self.get(record_id), location=new_location)
        self.records[record_id] = record
        return record

    def batch_update(self, id_greater_than, location, name_suffix=""):
        require_srid(location, self.srid)
        count = 0
        for record_id, record in self.records.items():
            if record_id > id_greater_than:
                name = (record.name or "") + name_suffix if name_suffix else record.name
                self.records[record_id] = replace(record, location=location, name=name)
                count += 1
        return count

    def delete_where(self, id_at_most):
        doomed = [i for i in self.records if i <= id_at_most]
        for i in doomed:
            del self.records[i]
        return len(doomed)

    def query(self, request, timeout=None):
        self.requests.append(request)
        records = self.list_all()
        if isinstance(request, NameMatch):
            if request.exact:
                return [r for r in records if r.name == request.name]
            return [r for r in records if r.name and request.name in r.name]
        if isinstance(request, WithinDistance):
            # Distance is the database's job; the fake only knows exact hits
            return [r for r in records if r.location == request.origin]
        raise AssertionError(f"Unexpected request {request!r}")


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def postgis_url():
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL is not set")
    return url
