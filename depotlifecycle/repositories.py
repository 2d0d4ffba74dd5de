# depotlifecycle/repositories.py
"""Store classes over the Flask-SQLAlchemy session.

Repositories add and flush but never commit; the route that owns the request
commits once, so party upserts and the parent write land in one transaction.
"""

from depotlifecycle import db
from depotlifecycle.models import Estimate, EstimateAllocation, Party, Release


class PartyRepository:
    def find_by_code(self, code):
        return db.session.get(Party, code)

    def save_or_update(self, party):
        """Return the canonical stored party for ``party.code``.

        A known code has its non-empty fields copied onto the stored row;
        an unknown code is inserted as given.
        """
        stored = self.find_by_code(party.code)
        if stored is None:
            db.session.add(party)
            db.session.flush()
            return party
        if stored is party:
            return stored
        for field in Party.FIELDS:
            value = getattr(party, field)
            if value is not None:
                setattr(stored, field, value)
        db.session.flush()
        return stored


class ReleaseRepository:
    def exists(self, release_number):
        if not release_number:
            return False
        return db.session.query(
            db.session.query(Release)
            .filter_by(release_number=release_number)
            .exists()
        ).scalar()

    def find_by_id(self, release_number):
        return db.session.get(Release, release_number)

    def find_all(self):
        return Release.query.order_by(Release.release_number).all()

    def save(self, release):
        db.session.add(release)
        db.session.flush()
        return release

    def update(self, release):
        merged = db.session.merge(release)
        db.session.flush()
        return merged


class EstimateRepository:
    def exists(self, estimate_number, revision):
        return db.session.get(Estimate, (estimate_number, revision)) is not None

    def exists_by_estimate_number(self, estimate_number):
        if not estimate_number:
            return False
        return db.session.query(
            db.session.query(Estimate)
            .filter_by(estimate_number=estimate_number)
            .exists()
        ).scalar()

    def save(self, estimate):
        db.session.add(estimate)
        db.session.flush()
        return estimate


class EstimateAllocationRepository:
    def save(self, allocation):
        db.session.add(allocation)
        db.session.flush()
        return allocation

    def find_by_estimate(self, estimate_number):
        return (
            EstimateAllocation.query
            .filter_by(estimate_number=estimate_number)
            .order_by(EstimateAllocation.id)
            .all()
        )
