"""Management commands for the shopqueue backend."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

import click

from shopqueue.core.exceptions import ShopQueueError
from shopqueue.db.session import SessionLocal, create_tables
from shopqueue.domain.entities import Customer, Service, Tenant
from shopqueue.repositories import (
    CustomerRepository,
    QueueRepository,
    ServiceRepository,
    TenantRepository,
)
from shopqueue.services import QueueService

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

DEMO_SERVICES = (
    ("Haircut", Decimal("25.00"), 30),
    ("Shave", Decimal("15.00"), 15),
    ("Beard Trim", Decimal("12.00"), 20),
)
DEMO_CUSTOMERS = ("Alex Rivera", "Sam Chen", "Jordan Blake")


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("init_db")
def init_db() -> None:
    """Create every table that does not exist yet."""
    create_tables()
    logging.info("Database schema is up to date.")


@cli.command("seed_demo")
@click.option("--tenant", "tenant_id", required=True, help="Tenant id to create.")
@click.option("--name", "business_name", default="Demo Barbershop", show_default=True)
@click.option("--timezone", "tz_name", default=None, help="IANA timezone of the shop.")
def seed_demo(tenant_id: str, business_name: str, tz_name: Optional[str]) -> None:
    """Create a tenant with a few services and customers."""
    create_tables()
    session = SessionLocal()
    try:
        tenants = TenantRepository(session)
        if tenants.get_by_id(tenant_id):
            raise click.ClickException(f"Tenant '{tenant_id}' already exists.")
        tenants.create(Tenant(id=tenant_id, business_name=business_name, timezone=tz_name))

        services = ServiceRepository(session)
        for name, price, duration in DEMO_SERVICES:
            services.create(
                Service(tenant_id=tenant_id, name=name, price=price, duration=duration)
            )
        customers = CustomerRepository(session)
        for name in DEMO_CUSTOMERS:
            customers.create(Customer(tenant_id=tenant_id, name=name))

        logging.info(
            "Seeded tenant %s with %d services and %d customers.",
            tenant_id,
            len(DEMO_SERVICES),
            len(DEMO_CUSTOMERS),
        )
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@cli.command("compact_queue")
@click.option("--tenant", "tenant_id", required=True, help="Tenant whose line to renumber.")
def compact_queue(tenant_id: str) -> None:
    """Renumber waiting and in-progress entries to 1..N in current order."""
    session = SessionLocal()
    try:
        service = QueueService(
            queue_repo=QueueRepository(session),
            customer_repo=CustomerRepository(session),
            service_repo=ServiceRepository(session),
            tenant_repo=TenantRepository(session),
        )
        active = service.compact(tenant_id)
        logging.info("Tenant %s: %d active entries renumbered.", tenant_id, len(active))
    except ShopQueueError as e:
        raise click.ClickException(e.message) from e
    finally:
        session.close()


if __name__ == "__main__":
    cli()
