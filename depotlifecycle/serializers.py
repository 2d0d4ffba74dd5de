# depotlifecycle/serializers.py

"""JSON <-> model conversion for the API.

The ``parse_*`` helpers are the validation pass: they reject malformed
payloads with :class:`ValidationFailure` before any store is touched and
return transient model instances.  The ``*_to_json`` helpers render models
as the camelCase documents the API exchanges.
"""

import math
import re

from depotlifecycle.errors import ValidationFailure
from depotlifecycle.models import (
    Estimate,
    EstimateAllocation,
    EstimateLineItem,
    Party,
    Release,
    ReleaseDetail,
)

PARTY_CODE = re.compile(r'^[A-Z0-9]{1,9}$')
DEPOT_CODE = re.compile(r'^[A-Z0-9]{9}$')
UNIT_NUMBER = re.compile(r'^[A-Z]{4}[X0-9]{6}[A-Z0-9]{0,1}$')
RECOMMENDATIONS = ('FIX', 'TLS', 'WAIT')
INT32_MAX = 2**31 - 1


# ---------------------------------------------------------------------------
# field helpers

def _string(data, key, max_length, required=False, pattern=None):
    value = data.get(key)
    if value is None or value == '':
        if required:
            raise ValidationFailure(f"{key} is required")
        return None
    if not isinstance(value, str):
        raise ValidationFailure(f"{key} must be a string")
    if len(value) > max_length:
        raise ValidationFailure(f"{key} must be at most {max_length} characters")
    if pattern is not None and not pattern.match(value):
        raise ValidationFailure(f"{key} has an invalid format")
    return value


def _integer(data, key, required=False, minimum=None, maximum=INT32_MAX):
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationFailure(f"{key} is required")
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationFailure(f"{key} must be an integer")
    if minimum is not None and value < minimum:
        raise ValidationFailure(f"{key} must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationFailure(f"{key} must be at most {maximum}")
    return value


def _number(data, key):
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailure(f"{key} must be a number")
    try:
        value = float(value)
    except OverflowError:
        raise ValidationFailure(f"{key} is out of range")
    if not math.isfinite(value):
        raise ValidationFailure(f"{key} must be a finite number")
    return value


def _object(data, key):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationFailure(f"{key} must be an object")
    return value


def _list(data, key):
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationFailure(f"{key} must be a list")
    for v in value:
        if not isinstance(v, dict):
            raise ValidationFailure(f"{key} entries must be objects")
    return value


def require_object(payload, what):
    if not isinstance(payload, dict):
        raise ValidationFailure(f"{what} body must be a JSON object")
    return payload


def query_string(args, key, max_length, required=False, pattern=None):
    """Validate a query parameter the same way body strings are validated."""
    return _string(args, key, max_length, required=required, pattern=pattern)


def query_integer(args, key, minimum=None, maximum=INT32_MAX):
    raw = args.get(key)
    if raw is None or raw == '':
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValidationFailure(f"{key} must be an integer")
    if minimum is not None and value < minimum:
        raise ValidationFailure(f"{key} must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationFailure(f"{key} must be at most {maximum}")
    return value


# ---------------------------------------------------------------------------
# parties

def parse_party(data, key):
    obj = _object(data, key)
    if obj is None:
        return None
    return Party(
        code           = _string(obj, 'code', 9, required=True, pattern=PARTY_CODE),
        name           = _string(obj, 'name', 100),
        street_address = _string(obj, 'streetAddress', 200),
        city           = _string(obj, 'city', 100),
        postal_code    = _string(obj, 'postalCode', 20),
        country_code   = _string(obj, 'countryCode', 2),
        phone          = _string(obj, 'phone', 40),
        email          = _string(obj, 'email', 200),
    )


def party_to_json(party):
    if party is None:
        return None
    return {
        'code'          : party.code,
        'name'          : party.name,
        'streetAddress' : party.street_address,
        'city'          : party.city,
        'postalCode'    : party.postal_code,
        'countryCode'   : party.country_code,
        'phone'         : party.phone,
        'email'         : party.email,
    }


# ---------------------------------------------------------------------------
# releases

def parse_release(payload):
    data = require_object(payload, 'Release')
    details = []
    for d in _list(data, 'details'):
        quantity = _integer(d, 'quantity', minimum=0)
        details.append(ReleaseDetail(
            customer  = parse_party(d, 'customer'),
            contract  = _string(d, 'contract', 32),
            equipment = _string(d, 'equipment', 10),
            grade     = _string(d, 'grade', 10),
            quantity  = 1 if quantity is None else quantity,
        ))
    return Release(
        release_number = _string(data, 'releaseNumber', 16),
        type           = _string(data, 'type', 32),
        status         = _string(data, 'status', 32),
        comments       = _string(data, 'comments', 2000),
        depot          = parse_party(data, 'depot'),
        recipient      = parse_party(data, 'recipient'),
        details        = details,
    )


def release_to_json(release):
    return {
        'releaseNumber' : release.release_number,
        'type'          : release.type,
        'status'        : release.status,
        'comments'      : release.comments,
        'depot'         : party_to_json(release.depot),
        'recipient'     : party_to_json(release.recipient),
        'details'       : [{
            'customer'  : party_to_json(d.customer),
            'contract'  : d.contract,
            'equipment' : d.equipment,
            'grade'     : d.grade,
            'quantity'  : d.quantity,
        } for d in release.details],
    }


# ---------------------------------------------------------------------------
# estimates

def parse_allocation(payload):
    data = require_object(payload, 'EstimateAllocation')
    decision = _object(data, 'preliminaryDecision') or {}
    recommendation = _string(decision, 'recommendation', 4)
    if recommendation is not None and recommendation not in RECOMMENDATIONS:
        raise ValidationFailure(
            f"recommendation must be one of {', '.join(RECOMMENDATIONS)}"
        )
    ctl = data.get('ctl', False)
    if not isinstance(ctl, bool):
        raise ValidationFailure("ctl must be a boolean")
    return EstimateAllocation(
        estimate_number   = _string(data, 'estimateNumber', 16),
        revision          = _integer(data, 'revision', minimum=0),
        depot             = parse_party(data, 'depot'),
        total             = _number(data, 'total'),
        owner_total       = _number(data, 'ownerTotal'),
        insurance_total   = _number(data, 'insuranceTotal'),
        customer_total    = _number(data, 'customerTotal'),
        ctl               = ctl,
        comments          = _string(data, 'comments', 2000),
        recommendation    = recommendation,
        decision_comments = _string(decision, 'comments', 2000),
    )


def allocation_to_json(allocation):
    decision = None
    if allocation.recommendation is not None:
        decision = {
            'recommendation' : allocation.recommendation,
            'comments'       : allocation.decision_comments,
        }
    return {
        'estimateNumber'      : allocation.estimate_number,
        'depot'               : party_to_json(allocation.depot),
        'revision'            : allocation.revision,
        'total'               : allocation.total,
        'ownerTotal'          : allocation.owner_total,
        'insuranceTotal'      : allocation.insurance_total,
        'customerTotal'       : allocation.customer_total,
        'ctl'                 : bool(allocation.ctl),
        'comments'            : allocation.comments,
        'preliminaryDecision' : decision,
    }


def parse_estimate(payload):
    data = require_object(payload, 'Estimate')
    items = []
    for i in _list(data, 'lineItems'):
        items.append(EstimateLineItem(
            line_number = _integer(i, 'lineNumber', required=True, minimum=1),
            damage_code = _string(i, 'damageCode', 10),
            repair_code = _string(i, 'repairCode', 10),
            location    = _string(i, 'location', 10),
            party       = _string(i, 'party', 1, required=True),
            total       = _number(i, 'total') or 0.0,
        ))
    allocation = _object(data, 'allocation')
    return Estimate(
        estimate_number = _string(data, 'estimateNumber', 16, required=True),
        revision        = _integer(data, 'revision', required=True, minimum=0),
        unit_number     = _string(data, 'unitNumber', 11, pattern=UNIT_NUMBER),
        equipment_code  = _string(data, 'equipmentCode', 10),
        total           = _number(data, 'total') or 0.0,
        comments        = _string(data, 'comments', 2000),
        depot           = parse_party(data, 'depot'),
        requester       = parse_party(data, 'requester'),
        owner           = parse_party(data, 'owner'),
        customer        = parse_party(data, 'customer'),
        allocation      = parse_allocation(allocation) if allocation is not None else None,
        line_items      = items,
    )
