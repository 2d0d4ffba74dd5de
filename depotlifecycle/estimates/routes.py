# depotlifecycle/estimates/routes.py

import json
import logging

from flask import Blueprint, abort, jsonify, request
from sqlalchemy.exc import IntegrityError

from depotlifecycle import db
from depotlifecycle.auth import check_api_access, is_validation_user
from depotlifecycle.errors import ValidationFailure
from depotlifecycle.models import CUSTOMER, INSURANCE, OWNER, EstimateAllocation
from depotlifecycle.repositories import (
    EstimateAllocationRepository,
    EstimateRepository,
    PartyRepository,
)
from depotlifecycle.serializers import (
    DEPOT_CODE,
    UNIT_NUMBER,
    allocation_to_json,
    parse_allocation,
    parse_estimate,
    query_integer,
    query_string,
    require_object,
)

bp = Blueprint('estimates', __name__)

party_repository = PartyRepository()
estimate_repository = EstimateRepository()
allocation_repository = EstimateAllocationRepository()


@bp.before_request
def before():
    check_api_access()


def _check_estimate_number(estimate_number):
    if len(estimate_number) > 16:
        raise ValidationFailure("estimateNumber must be at most 16 characters")


@bp.route('', methods=['GET'])
def index_estimate():
    """Estimate search; parameters are validated but searching is not supported."""
    query_string(request.args, 'estimateNumber', 16)
    query_string(request.args, 'unitNumber', 11, pattern=UNIT_NUMBER)
    query_string(request.args, 'depot', 9, pattern=DEPOT_CODE)
    query_string(request.args, 'lessee', 9, pattern=DEPOT_CODE)
    query_integer(request.args, 'revision', minimum=0)
    query_string(request.args, 'equipmentCode', 10)
    abort(501)


@bp.route('', methods=['POST'])
def save_estimate():
    """
    Create an estimate revision.
    Responds with an example allocation built from the estimate's own totals.
    """
    logging.info("Received Estimate Create")
    payload = request.get_json(silent=True)
    logging.info(json.dumps(payload))

    estimate = parse_estimate(payload)
    if estimate_repository.exists(estimate.estimate_number, estimate.revision):
        raise ValidationFailure("Estimate revision already exists.")
    if estimate.allocation is not None:
        if estimate.allocation.estimate_number is None:
            estimate.allocation.estimate_number = estimate.estimate_number
        if estimate.allocation.revision is None:
            estimate.allocation.revision = estimate.revision

    _save_parties(estimate)
    try:
        estimate_repository.save(estimate)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationFailure("Estimate revision already exists.")

    # Example allocation for demo purposes; it is not stored.
    allocation = EstimateAllocation(
        estimate_number = estimate.estimate_number,
        depot           = estimate.depot,
        revision        = estimate.revision,
        total           = estimate.total,
        owner_total     = estimate.party_total(OWNER),
        insurance_total = estimate.party_total(INSURANCE),
        customer_total  = estimate.party_total(CUSTOMER),
        ctl             = False,
        comments        = estimate.comments,
        recommendation  = 'FIX',
    )
    body = allocation_to_json(allocation)

    logging.info("Responding with example Estimate Allocation")
    logging.info(json.dumps(body))
    return jsonify(body)


def _save_parties(estimate):
    if estimate.depot is not None:
        estimate.depot = party_repository.save_or_update(estimate.depot)

    if estimate.requester is not None:
        estimate.requester = party_repository.save_or_update(estimate.requester)

    if estimate.owner is not None:
        estimate.owner = party_repository.save_or_update(estimate.owner)

    if estimate.customer is not None:
        estimate.customer = party_repository.save_or_update(estimate.customer)

    allocation = estimate.allocation
    if allocation is not None and allocation.depot is not None:
        allocation.depot = party_repository.save_or_update(allocation.depot)


@bp.route('/<estimate_number>', methods=['GET'])
def show_estimate(estimate_number):
    """Fetch one estimate revision; not supported by this server."""
    _check_estimate_number(estimate_number)
    query_string(request.args, 'depot', 9, required=True, pattern=DEPOT_CODE)
    query_integer(request.args, 'revision', minimum=0)
    abort(501)


@bp.route('/<estimate_number>', methods=['PUT'])
def customer_approve_estimate(estimate_number):
    """Customer approval of an estimate; not supported by this server."""
    _check_estimate_number(estimate_number)
    query_string(request.args, 'depot', 9, required=True, pattern=DEPOT_CODE)
    require_object(request.get_json(silent=True), 'EstimateCustomerApproval')
    abort(501)


@bp.route('/<estimate_number>', methods=['PATCH'])
def update_totals(estimate_number):
    """
    Record the totals of an estimate whose creation was delayed for manual
    processing.  The validation user may allocate estimates this server has
    never seen.
    """
    logging.info("Received Estimate Totals Allocation")
    payload = request.get_json(silent=True)
    logging.info(json.dumps(payload))

    _check_estimate_number(estimate_number)
    allocation = parse_allocation(payload)
    if allocation.estimate_number is None:
        allocation.estimate_number = estimate_number
    elif allocation.estimate_number != estimate_number:
        raise ValidationFailure("estimateNumber in the body does not match the path.")

    if not is_validation_user():
        if not estimate_repository.exists_by_estimate_number(estimate_number):
            raise ValidationFailure("Estimate does not exist to allocate.")

    if allocation.depot is not None:
        allocation.depot = party_repository.save_or_update(allocation.depot)

    allocation_repository.save(allocation)
    db.session.commit()

    logging.info("Responding with OK")
    return '', 200
