"""Snapshot loader: reads invoices, active clients and items into immutable records.

Rows that cannot be turned into a record (missing dates, unknown status,
negative amounts) are skipped and counted; storage failures surface as
AnalysisUnavailableError.
"""
from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from invoice_insights import metrics
from invoice_insights.core.exceptions import AnalysisUnavailableError
from invoice_insights.models import models
from invoice_insights.models.records import (
    ClientRecord,
    ClientStatus,
    InvoiceRecord,
    InvoiceStatus,
    ItemRecord,
    ItemStatus,
    Snapshot,
)

logger = logging.getLogger(__name__)


class MalformedRecordError(ValueError):
    """A stored row is missing data the analytics engine needs."""


def _aware(value: dt.datetime | None) -> dt.datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


class SnapshotLoader:
    """Fetch one consistent in-memory snapshot per analytics request."""

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> Snapshot:
        try:
            invoice_rows = (
                self.db.query(models.Invoice)
                .options(
                    joinedload(models.Invoice.client),
                    selectinload(models.Invoice.items),
                )
                .order_by(models.Invoice.id)
                .all()
            )
            client_rows = (
                self.db.query(models.Client)
                .filter(models.Client.status == ClientStatus.ACTIVE.value)
                .order_by(models.Client.id)
                .all()
            )
            item_rows = self.db.query(models.Item).order_by(models.Item.id).all()
        except SQLAlchemyError as exc:
            logger.error("Snapshot fetch failed: %s", exc)
            raise AnalysisUnavailableError("storage", str(exc)) from exc

        clients = self._convert(client_rows, self.to_client_record, "client")
        items = self._convert(item_rows, self.to_item_record, "item")
        invoices = self._convert(invoice_rows, self.to_invoice_record, "invoice")
        logger.info(
            "Loaded snapshot: %d invoices, %d active clients, %d items",
            len(invoices),
            len(clients),
            len(items),
        )
        return Snapshot(invoices=invoices, clients=clients, items=items)

    @staticmethod
    def _convert(rows, converter, kind: str) -> tuple:
        records = []
        skipped = 0
        for row in rows:
            try:
                records.append(converter(row))
            except MalformedRecordError as exc:
                skipped += 1
                logger.warning("Skipping malformed %s id=%s: %s", kind, getattr(row, "id", None), exc)
        metrics.snapshot_record_skipped(kind, skipped)
        return tuple(records)

    # ========================================================================
    # Row -> record conversion
    # ========================================================================

    @staticmethod
    def to_client_record(row: models.Client) -> ClientRecord:
        if not row.name:
            raise MalformedRecordError("client has no name")
        try:
            status = ClientStatus(row.status or ClientStatus.ACTIVE.value)
        except ValueError as exc:
            raise MalformedRecordError(f"unknown client status {row.status!r}") from exc
        return ClientRecord(
            id=str(row.id),
            name=row.name,
            status=status,
            email=row.email,
            phone_number=row.phone_number,
            address=row.address,
            billing_address=row.billing_address,
            created_at=_aware(row.created_at),
        )

    @staticmethod
    def to_item_record(row: models.Item) -> ItemRecord:
        if row.unit_price is None or row.unit_price < 0:
            raise MalformedRecordError(f"invalid unit price {row.unit_price!r}")
        try:
            status = ItemStatus(row.status) if row.status else None
        except ValueError as exc:
            raise MalformedRecordError(f"unknown item status {row.status!r}") from exc
        return ItemRecord(
            id=str(row.id),
            name=row.name,
            unit_price=Decimal(row.unit_price),
            quantity=row.quantity or 0,
            status=status,
        )

    @classmethod
    def to_invoice_record(cls, row: models.Invoice) -> InvoiceRecord:
        if row.issue_date is None or row.due_date is None:
            raise MalformedRecordError("invoice is missing issue or due date")
        if row.total is None or row.total < 0:
            raise MalformedRecordError(f"invalid total {row.total!r}")
        try:
            status = InvoiceStatus(row.status)
        except ValueError as exc:
            raise MalformedRecordError(f"unknown invoice status {row.status!r}") from exc

        # A dangling client reference is kept as None; aggregators skip it.
        client = None
        if row.client is not None:
            try:
                client = cls.to_client_record(row.client)
            except MalformedRecordError as exc:
                logger.warning("Invoice %s has malformed client: %s", row.invoice_number, exc)

        items = []
        for item in row.items:
            try:
                items.append(cls.to_item_record(item))
            except MalformedRecordError:
                logger.warning("Dropping malformed item id=%s from invoice %s", item.id, row.invoice_number)

        return InvoiceRecord(
            id=str(row.id),
            invoice_number=row.invoice_number,
            client=client,
            items=tuple(items),
            total=Decimal(row.total),
            status=status,
            issue_date=_aware(row.issue_date),
            due_date=_aware(row.due_date),
        )
