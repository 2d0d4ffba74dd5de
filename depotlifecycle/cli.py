# depotlifecycle/cli.py
"""``flask depot ...`` maintenance commands."""

import logging

import click
from flask.cli import AppGroup

from depotlifecycle import db
from depotlifecycle.models import Party, Release, ReleaseDetail
from depotlifecycle.repositories import PartyRepository, ReleaseRepository

DEMO_RELEASE_NUMBER = 'RHAMG000000'


@click.group("depot", cls=AppGroup)
def depot_cli() -> None:
    """Depot lifecycle maintenance commands."""


@depot_cli.command("init-db")
def init_db_command() -> None:
    db.create_all()
    click.echo("Database tables created.")


@depot_cli.command("load-demo")
def load_demo_command() -> None:
    """Upsert the demo parties and release used by the API examples."""
    created = load_demo()
    if created:
        click.echo(f"Created release {DEMO_RELEASE_NUMBER}.")
    else:
        click.echo(f"Release {DEMO_RELEASE_NUMBER} already present; parties refreshed.")


@depot_cli.command("list-releases")
def list_releases_command() -> None:
    for release in ReleaseRepository().find_all():
        depot = release.depot.code if release.depot else '-'
        click.echo(f"{release.release_number}\t{depot}\t{len(release.details)} detail(s)")


def load_demo() -> bool:
    parties = PartyRepository()
    releases = ReleaseRepository()

    depot = parties.save_or_update(Party(
        code='DEHAMCMRA', name='Hamburg Container Depot', city='Hamburg',
        country_code='DE',
    ))
    customer = parties.save_or_update(Party(
        code='SGSINONEA', name='Ocean Network Express', city='Singapore',
        country_code='SG',
    ))
    recipient = parties.save_or_update(Party(
        code='DEHAMTRCK', name='Hamburg Trucking', city='Hamburg',
        country_code='DE',
    ))

    created = False
    if not releases.exists(DEMO_RELEASE_NUMBER):
        releases.save(Release(
            release_number=DEMO_RELEASE_NUMBER,
            type='BOOK',
            status='ACTV',
            depot=depot,
            recipient=recipient,
            details=[ReleaseDetail(customer=customer, equipment='22G1', grade='IICL', quantity=2)],
        ))
        created = True
    db.session.commit()
    logging.info("demo data loaded release=%s created=%s", DEMO_RELEASE_NUMBER, created)
    return created
