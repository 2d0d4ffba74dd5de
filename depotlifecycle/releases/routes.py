# depotlifecycle/releases/routes.py

import json
import logging

from flask import Blueprint, abort, jsonify, request
from sqlalchemy.exc import IntegrityError

from depotlifecycle import db
from depotlifecycle.auth import check_api_access
from depotlifecycle.errors import ValidationFailure
from depotlifecycle.repositories import PartyRepository, ReleaseRepository
from depotlifecycle.serializers import parse_release, query_string, release_to_json

bp = Blueprint('releases', __name__)

party_repository = PartyRepository()
release_repository = ReleaseRepository()


@bp.before_request
def before():
    check_api_access()


@bp.route('', methods=['GET'])
def index_release():
    """
    Search for releases.
    ?releaseNumber= narrows the search to exactly that release.
    Returns [ release, … ] or 404 when nothing matched.
    """
    logging.info("Received Release Search")
    release_number = query_string(request.args, 'releaseNumber', 16)
    if release_number:
        logging.info(release_number)

    releases = []
    if release_number is not None:
        release = release_repository.find_by_id(release_number)
        if release is not None:
            releases.append(release)
    else:
        releases.extend(release_repository.find_all())

    if not releases:
        logging.info("\tRelease Search - 404 - Not Found")
        abort(404)

    logging.info("\tRelease Search - 200 - Found Releases")
    return jsonify([release_to_json(r) for r in releases])


@bp.route('', methods=['POST'])
def save_release():
    """Create a release; the release number must not exist yet."""
    logging.info("Received Release Create")
    payload = request.get_json(silent=True)
    logging.info(json.dumps(payload))

    release = parse_release(payload)
    if release.release_number is None:
        raise ValidationFailure("releaseNumber is required")
    if release_repository.exists(release.release_number):
        raise ValidationFailure("Release already exists; please update instead.")

    _save_parties(release)
    try:
        release_repository.save(release)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationFailure("Release already exists; please update instead.")

    logging.info("\tRelease Create - 200 - Saved %s", release.release_number)
    return '', 200


@bp.route('/<release_number>', methods=['PUT'])
def update_release(release_number):
    """Replace an existing release, details included."""
    logging.info("Received Release Update")
    payload = request.get_json(silent=True)
    logging.info(json.dumps(payload))

    if len(release_number) > 16:
        raise ValidationFailure("releaseNumber must be at most 16 characters")
    release = parse_release(payload)
    if release.release_number is None:
        release.release_number = release_number
    elif release.release_number != release_number:
        raise ValidationFailure("releaseNumber in the body does not match the path.")

    if not release_repository.exists(release_number):
        raise ValidationFailure("Release does not exist.")

    _save_parties(release)
    release_repository.update(release)
    db.session.commit()

    logging.info("\tRelease Update - 200 - Saved %s", release_number)
    return '', 200


def _save_parties(release):
    for detail in release.details:
        if detail.customer is not None:
            detail.customer = party_repository.save_or_update(detail.customer)

    if release.depot is not None:
        release.depot = party_repository.save_or_update(release.depot)

    if release.recipient is not None:
        release.recipient = party_repository.save_or_update(release.recipient)
