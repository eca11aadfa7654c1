from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy.orm import Session

from app.models.checkin_item import CheckInItem

Item = dict[str, Any]

# Attributes that map onto real columns; everything else goes into `data`.
KEY_ATTRIBUTES = ("PK", "SK", "type", "createdBy", "userId")

# keys per IN list, well under SQLite's bound-parameter limit
BATCH_GET_CHUNK = 500

# secondary index name -> hash key column (range key is always `type`)
INDEXES = {
    "created-by-index": CheckInItem.created_by,
    "user-type-index": CheckInItem.user_id,
}


def item_to_row(item: Item) -> CheckInItem:
    return CheckInItem(
        pk=item["PK"],
        sk=item["SK"],
        type=item["type"],
        created_by=item.get("createdBy"),
        user_id=item.get("userId"),
        data={k: v for k, v in item.items() if k not in KEY_ATTRIBUTES},
    )


def row_to_item(row: CheckInItem) -> Item:
    item: Item = dict(row.data or {})
    item["PK"] = row.pk
    item["SK"] = row.sk
    item["type"] = row.type
    if row.created_by is not None:
        item["createdBy"] = row.created_by
    if row.user_id is not None:
        item["userId"] = row.user_id
    return item


class CheckInTable:
    """
    Key-value access to the single check-in table.

    Items are plain dicts shaped like document-store items: `PK`, `SK`,
    `type`, the optional index keys `createdBy` / `userId`, plus free-form
    attributes. Writes are flushed immediately so failures surface at the
    call site; committing is left to the session owner.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, pk: str, sk: str) -> Item | None:
        row = self.db.get(CheckInItem, (pk, sk))
        return row_to_item(row) if row else None

    def put(self, item: Item) -> None:
        self.db.merge(item_to_row(item))
        self.db.flush()

    def batch_write(self, items: Iterable[Item]) -> None:
        """Insert-only batch of new items, flushed once. Use put() to overwrite."""
        self.db.add_all([item_to_row(i) for i in items])
        self.db.flush()

    def batch_get(self, keys: list[tuple[str, str]]) -> list[Item]:
        """Fetch items by (PK, SK); missing keys are simply absent from the result."""
        pks_by_sk: dict[str, list[str]] = {}
        for pk, sk in dict.fromkeys(keys):
            pks_by_sk.setdefault(sk, []).append(pk)

        rows: list[CheckInItem] = []
        for sk, pks in pks_by_sk.items():
            for start in range(0, len(pks), BATCH_GET_CHUNK):
                chunk = pks[start:start + BATCH_GET_CHUNK]
                rows.extend(
                    self.db.query(CheckInItem)
                    .filter(CheckInItem.sk == sk, CheckInItem.pk.in_(chunk))
                    .all()
                )
        return [row_to_item(r) for r in rows]

    def query(self, pk: str, sk_prefix: str | None = None) -> list[Item]:
        q = self.db.query(CheckInItem).filter(CheckInItem.pk == pk)
        if sk_prefix:
            q = q.filter(CheckInItem.sk.startswith(sk_prefix, autoescape=True))
        return [row_to_item(r) for r in q.order_by(CheckInItem.sk).all()]

    def query_index(self, index_name: str, key: str, item_type: str) -> list[Item]:
        try:
            column = INDEXES[index_name]
        except KeyError:
            raise ValueError(f"Unknown index: {index_name}") from None

        rows = (
            self.db.query(CheckInItem)
            .filter(column == key, CheckInItem.type == item_type)
            .order_by(CheckInItem.pk, CheckInItem.sk)
            .all()
        )
        return [row_to_item(r) for r in rows]

    def update(self, pk: str, sk: str, changes: dict[str, Any]) -> Item | None:
        """
        Set attributes on an existing item. Returns the updated item, or
        None when no item exists at the key (nothing is created).
        """
        row = self.db.get(CheckInItem, (pk, sk))
        if row is None:
            return None

        for attr in changes:
            if attr in ("PK", "SK", "type"):
                raise ValueError(f"Cannot update key attribute {attr}")

        data = dict(row.data or {})
        for attr, value in changes.items():
            if attr == "createdBy":
                row.created_by = value
            elif attr == "userId":
                row.user_id = value
            else:
                data[attr] = value
        # reassign so the JSON column is marked dirty
        row.data = data
        self.db.flush()
        return row_to_item(row)
