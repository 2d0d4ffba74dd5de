from depotlifecycle import db

OWNER = 'O'
INSURANCE = 'I'
CUSTOMER = 'U'


class Party(db.Model):
    __tablename__ = 'party'
    code           = db.Column(db.String(9), primary_key=True)
    name           = db.Column(db.String(100))
    street_address = db.Column(db.String(200))
    city           = db.Column(db.String(100))
    postal_code    = db.Column(db.String(20))
    country_code   = db.Column(db.String(2))
    phone          = db.Column(db.String(40))
    email          = db.Column(db.String(200))

    # columns copied onto the stored row by save-or-update
    FIELDS = ('name', 'street_address', 'city', 'postal_code',
              'country_code', 'phone', 'email')


class Release(db.Model):
    __tablename__ = 'depot_release'
    release_number = db.Column(db.String(16), primary_key=True)
    type           = db.Column(db.String(32))
    status         = db.Column(db.String(32))
    comments       = db.Column(db.Text)
    depot_code     = db.Column(db.String(9), db.ForeignKey('party.code'))
    recipient_code = db.Column(db.String(9), db.ForeignKey('party.code'))

    depot     = db.relationship('Party', foreign_keys=[depot_code])
    recipient = db.relationship('Party', foreign_keys=[recipient_code])
    details   = db.relationship(
                  'ReleaseDetail',
                  backref='release',
                  lazy=True,
                  cascade='all, delete-orphan',
                  order_by='ReleaseDetail.id'
                )


class ReleaseDetail(db.Model):
    __tablename__ = 'release_detail'
    id             = db.Column(db.Integer, primary_key=True)
    release_number = db.Column(db.String(16), db.ForeignKey('depot_release.release_number'), nullable=False)
    customer_code  = db.Column(db.String(9), db.ForeignKey('party.code'))
    contract       = db.Column(db.String(32))
    equipment      = db.Column(db.String(10))   # ISO equipment code
    grade          = db.Column(db.String(10))
    quantity       = db.Column(db.Integer, default=1)

    customer = db.relationship('Party', foreign_keys=[customer_code])


class EstimateAllocation(db.Model):
    __tablename__ = 'estimate_allocation'
    id                = db.Column(db.Integer, primary_key=True)
    estimate_number   = db.Column(db.String(16), nullable=False)
    revision          = db.Column(db.Integer)
    depot_code        = db.Column(db.String(9), db.ForeignKey('party.code'))
    total             = db.Column(db.Float)
    owner_total       = db.Column(db.Float)
    insurance_total   = db.Column(db.Float)
    customer_total    = db.Column(db.Float)
    ctl               = db.Column(db.Boolean, default=False)
    comments          = db.Column(db.Text)
    recommendation    = db.Column(db.String(4))    # preliminary decision: FIX, TLS or WAIT
    decision_comments = db.Column(db.Text)

    depot = db.relationship('Party', foreign_keys=[depot_code])


class Estimate(db.Model):
    __tablename__ = 'estimate'
    estimate_number = db.Column(db.String(16), primary_key=True)
    revision        = db.Column(db.Integer, primary_key=True, autoincrement=False)
    unit_number     = db.Column(db.String(11))
    equipment_code  = db.Column(db.String(10))
    total           = db.Column(db.Float, default=0.0)
    comments        = db.Column(db.Text)
    depot_code      = db.Column(db.String(9), db.ForeignKey('party.code'))
    requester_code  = db.Column(db.String(9), db.ForeignKey('party.code'))
    owner_code      = db.Column(db.String(9), db.ForeignKey('party.code'))
    customer_code   = db.Column(db.String(9), db.ForeignKey('party.code'))
    allocation_id   = db.Column(db.Integer, db.ForeignKey('estimate_allocation.id'))

    depot     = db.relationship('Party', foreign_keys=[depot_code])
    requester = db.relationship('Party', foreign_keys=[requester_code])
    owner     = db.relationship('Party', foreign_keys=[owner_code])
    customer  = db.relationship('Party', foreign_keys=[customer_code])
    allocation = db.relationship('EstimateAllocation', foreign_keys=[allocation_id])

    line_items = db.relationship(
        'EstimateLineItem',
        backref='estimate',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='EstimateLineItem.line_number'
    )

    def party_total(self, party):
        """Sum of line item totals the given responsibility party pays.

        ``party`` is a role code such as ``O`` (owner), ``I`` (insurance)
        or ``U`` (customer / user).
        """
        return sum(
            ((i.total or 0.0) for i in self.line_items if i.party == party),
            0.0
        )


class EstimateLineItem(db.Model):
    __tablename__ = 'estimate_line_item'
    __table_args__ = (
        db.ForeignKeyConstraint(
            ['estimate_number', 'revision'],
            ['estimate.estimate_number', 'estimate.revision'],
        ),
    )
    id              = db.Column(db.Integer, primary_key=True)
    estimate_number = db.Column(db.String(16), nullable=False)
    revision        = db.Column(db.Integer, nullable=False)
    line_number     = db.Column(db.Integer, nullable=False)
    damage_code     = db.Column(db.String(10))
    repair_code     = db.Column(db.String(10))
    location        = db.Column(db.String(10))
    party           = db.Column(db.String(1), nullable=False)
    total           = db.Column(db.Float, default=0.0)
