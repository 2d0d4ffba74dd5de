# depotlifecycle/openapi.py
"""OpenAPI 3 description of the release and estimate endpoints."""

from flask import Blueprint, jsonify

from depotlifecycle.serializers import INT32_MAX

bp = Blueprint('docs', __name__)

API_VERSION = '2.0.0'


def _ref(name):
    return {'$ref': f'#/components/schemas/{name}'}


def _json(schema):
    return {'application/json': {'schema': schema}}


def _string(max_length=None, example=None, pattern=None):
    s = {'type': 'string'}
    if max_length is not None:
        s['maxLength'] = max_length
    if pattern is not None:
        s['pattern'] = pattern
    if example is not None:
        s['example'] = example
    return s


def _int32(example=None, minimum=0):
    s = {'type': 'integer', 'format': 'int32', 'minimum': minimum, 'maximum': INT32_MAX}
    if example is not None:
        s['example'] = example
    return s


def _param(name, where, description, schema, required=False):
    return {
        'name': name,
        'in': where,
        'description': description,
        'required': required,
        'schema': schema,
    }


DEPOT_PATTERN = '^[A-Z0-9]{9}$'
UNIT_PATTERN = '^[A-Z]{4}[X0-9]{6}[A-Z0-9]{0,1}$'

SCHEMAS = {
    'Party': {
        'type': 'object',
        'required': ['code'],
        'properties': {
            'code': _string(9, 'DEHAMCMRA', '^[A-Z0-9]{1,9}$'),
            'name': _string(100),
            'streetAddress': _string(200),
            'city': _string(100),
            'postalCode': _string(20),
            'countryCode': _string(2, 'DE'),
            'phone': _string(40),
            'email': _string(200),
        },
    },
    'ReleaseDetail': {
        'type': 'object',
        'properties': {
            'customer': _ref('Party'),
            'contract': _string(32),
            'equipment': _string(10, '22G1'),
            'grade': _string(10),
            'quantity': _int32(1),
        },
    },
    'Release': {
        'type': 'object',
        'required': ['releaseNumber'],
        'properties': {
            'releaseNumber': _string(16, 'RHAMG000000'),
            'type': _string(32),
            'status': _string(32),
            'comments': _string(2000),
            'depot': _ref('Party'),
            'recipient': _ref('Party'),
            'details': {'type': 'array', 'items': _ref('ReleaseDetail')},
        },
    },
    'EstimateLineItem': {
        'type': 'object',
        'required': ['lineNumber', 'party'],
        'properties': {
            'lineNumber': _int32(1, minimum=1),
            'damageCode': _string(10),
            'repairCode': _string(10),
            'location': _string(10),
            'party': dict(_string(1, 'O'), description='responsible party: O owner, I insurance, U customer'),
            'total': {'type': 'number', 'format': 'double'},
        },
    },
    'PreliminaryDecision': {
        'type': 'object',
        'properties': {
            'recommendation': {'type': 'string', 'enum': ['FIX', 'TLS', 'WAIT']},
            'comments': _string(2000),
        },
    },
    'EstimateAllocation': {
        'type': 'object',
        'properties': {
            'estimateNumber': _string(16, 'DEHAMCE1856373'),
            'depot': _ref('Party'),
            'revision': _int32(0),
            'total': {'type': 'number', 'format': 'double'},
            'ownerTotal': {'type': 'number', 'format': 'double'},
            'insuranceTotal': {'type': 'number', 'format': 'double'},
            'customerTotal': {'type': 'number', 'format': 'double'},
            'ctl': {'type': 'boolean', 'description': 'constructive total loss'},
            'comments': _string(2000),
            'preliminaryDecision': _ref('PreliminaryDecision'),
        },
    },
    'Estimate': {
        'type': 'object',
        'required': ['estimateNumber', 'revision'],
        'properties': {
            'estimateNumber': _string(16, 'DEHAMCE1856373'),
            'revision': _int32(0),
            'unitNumber': _string(11, 'CONU1234561', UNIT_PATTERN),
            'equipmentCode': _string(10, '22G1'),
            'total': {'type': 'number', 'format': 'double'},
            'comments': _string(2000),
            'depot': _ref('Party'),
            'requester': _ref('Party'),
            'owner': _ref('Party'),
            'customer': _ref('Party'),
            'allocation': _ref('EstimateAllocation'),
            'lineItems': {'type': 'array', 'items': _ref('EstimateLineItem')},
        },
    },
    'EstimateCustomerApproval': {'type': 'object'},
    'ErrorResponse': {
        'type': 'object',
        'required': ['code', 'message'],
        'properties': {'code': _string(example='ERR000'), 'message': _string()},
    },
    'Message': {
        'type': 'object',
        'required': ['message'],
        'properties': {'message': _string()},
    },
}


def _responses(ok, **extra):
    responses = {'200': ok}
    responses.update(extra)
    responses.update({
        '400': {'description': 'an invalid request was provided', 'content': _json(_ref('ErrorResponse'))},
        '401': {'description': 'credentials are missing or wrong', 'content': _json(_ref('Message'))},
        '403': {'description': 'security disallows access'},
        '500': {'description': 'a storage or server fault', 'content': _json(_ref('ErrorResponse'))},
        '501': {'description': 'this feature is not supported by this server', 'content': _json(_ref('Message'))},
        '503': {'description': 'API is temporarily paused, and not accepting any activity', 'content': _json(_ref('Message'))},
    })
    return dict(sorted(responses.items()))


def _not_found(description):
    return {'description': description, 'content': _json(_ref('Message'))}


ESTIMATE_NUMBER = _param('estimateNumber', 'path', 'the estimate number',
                         _string(16, 'DEHAMCE1856373'), required=True)
DEPOT_QUERY = _param('depot', 'query', 'the identifier of the depot',
                     _string(9, 'DEHAMCMRA', DEPOT_PATTERN), required=True)

PATHS = {
    '/api/v2/release': {
        'get': {
            'tags': ['release'],
            'operationId': 'indexRelease',
            'summary': 'search for a release',
            'description': 'Finds Releases for the given the criteria.',
            'parameters': [
                _param('releaseNumber', 'query', 'the release number to filter to',
                       _string(16, 'RHAMG000000')),
            ],
            'responses': _responses(
                {'description': 'successful search',
                 'content': _json({'type': 'array', 'items': _ref('Release')})},
                **{'404': _not_found('no releases were found')}
            ),
        },
        'post': {
            'tags': ['release'],
            'operationId': 'saveRelease',
            'summary': 'create release',
            'description': 'Creates a Release for the given criteria.',
            'requestBody': {'required': True, 'content': _json(_ref('Release'))},
            'responses': _responses(
                {'description': 'successful create'},
                **{'404': _not_found('the release depot was not found')}
            ),
        },
    },
    '/api/v2/release/{releaseNumber}': {
        'put': {
            'tags': ['release'],
            'operationId': 'updateRelease',
            'summary': 'update release',
            'description': 'Updates an existing Release.',
            'parameters': [
                _param('releaseNumber', 'path', 'the release to update',
                       _string(16, 'RHAMG000000'), required=True),
            ],
            'requestBody': {'required': True, 'content': _json(_ref('Release'))},
            'responses': _responses(
                {'description': 'successful update'},
                **{'404': _not_found('the release was not found')}
            ),
        },
    },
    '/api/v2/estimate': {
        'get': {
            'tags': ['estimate'],
            'operationId': 'indexEstimate',
            'summary': 'search for estimate(s)',
            'description': 'Given search criteria, return estimates that match that criteria.',
            'parameters': [
                _param('estimateNumber', 'query', 'the estimate number', _string(16, 'DEHAMCE1856373')),
                _param('unitNumber', 'query', 'the unit number of the shipping container',
                       _string(11, 'CONU1234561', UNIT_PATTERN)),
                _param('depot', 'query', 'the identifier of the depot', _string(9, 'DEHAMCMRA', DEPOT_PATTERN)),
                _param('lessee', 'query', 'the identifier of the lessee', _string(9, 'SGSINONEA', DEPOT_PATTERN)),
                _param('revision', 'query', 'the revision number of the estimate', _int32(0)),
                _param('equipmentCode', 'query', 'the ISO equipment code', _string(10, '22G1')),
            ],
            'responses': _responses(
                {'description': 'successful found at least one estimate',
                 'content': _json({'type': 'array', 'items': _ref('Estimate')})},
                **{'404': _not_found('no estimates were found')}
            ),
        },
        'post': {
            'tags': ['estimate'],
            'operationId': 'saveEstimate',
            'summary': 'create an estimate revision',
            'description': 'Create a damage estimate or a revision to an existing estimate '
                           'that documents the type of damage and the cost of the repairs.',
            'requestBody': {'required': True, 'content': _json(_ref('Estimate'))},
            'responses': _responses(
                {'description': 'successfully created and accepted the estimate revision',
                 'content': _json(_ref('EstimateAllocation'))},
                **{
                    '201': {'description': 'estimate created and a repair authorization issued'},
                    '202': {'description': 'estimate accepted for manual processing'},
                    '404': _not_found('the shipping container or depot could not be found'),
                }
            ),
        },
    },
    '/api/v2/estimate/{estimateNumber}': {
        'get': {
            'tags': ['estimate'],
            'operationId': 'showEstimate',
            'summary': 'fetch an estimate revision',
            'description': 'Finds an estimate by the given estimate number and depot, returning '
                           'the revision specified, or the current one when not specified.',
            'parameters': [
                ESTIMATE_NUMBER,
                DEPOT_QUERY,
                _param('revision', 'query', 'the revision number to show', _int32(0)),
            ],
            'responses': _responses(
                {'description': 'successfully found the estimate', 'content': _json(_ref('Estimate'))},
                **{'404': _not_found('estimate not found')}
            ),
        },
        'put': {
            'tags': ['estimate'],
            'operationId': 'customerApproveEstimate',
            'summary': 'customer approve an estimate',
            'description': 'Approve an estimate without revising it.',
            'parameters': [ESTIMATE_NUMBER, DEPOT_QUERY],
            'requestBody': {'required': True, 'content': _json(_ref('EstimateCustomerApproval'))},
            'responses': _responses(
                {'description': 'successfully approved the estimate revision',
                 'content': _json(_ref('EstimateAllocation'))},
                **{
                    '201': {'description': 'approval received and a repair authorization issued'},
                    '202': {'description': 'approval accepted for manual processing'},
                    '404': _not_found('the estimate or depot was not found'),
                }
            ),
        },
        'patch': {
            'tags': ['estimate'],
            'operationId': 'updateTotals',
            'summary': 'update estimate totals',
            'description': 'After manual processing of a delayed estimate completes, '
                           'records the totals of the estimate.',
            'parameters': [ESTIMATE_NUMBER],
            'requestBody': {'required': True, 'content': _json(_ref('EstimateAllocation'))},
            'responses': _responses(
                {'description': 'successfully received estimate totals'},
                **{'404': _not_found('the estimate was not found')}
            ),
        },
    },
}


def build_document():
    return {
        'openapi': '3.0.3',
        'info': {
            'title': 'Depot Lifecycle API',
            'version': API_VERSION,
        },
        'tags': [{'name': 'release'}, {'name': 'estimate'}],
        'security': [{'basicAuth': []}],
        'paths': PATHS,
        'components': {
            'securitySchemes': {'basicAuth': {'type': 'http', 'scheme': 'basic'}},
            'schemas': SCHEMAS,
        },
    }


@bp.route('/openapi.json')
def openapi_spec():
    return jsonify(build_document())
