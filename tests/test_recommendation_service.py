"""Tests for similarity-based product recommendations."""
from factories import make_client, make_invoice, make_item

from invoice_insights.models.records import ItemStatus
from invoice_insights.services.analytics import recommend_products
from invoice_insights.services.analytics.recommendation_service import similarity


def _catalogue(*ids):
    return [make_item(item_id, f"Product {item_id}", "20") for item_id in ids]


def test_similar_clients_vote_for_their_other_items():
    p1, p2, p3 = _catalogue("P1", "P2", "P3")
    a, b, c = make_client("A", "Alpha"), make_client("B", "Beta"), make_client("C", "Gamma")
    invoices = [
        make_invoice(a, 10, items=(p1, p2)),
        make_invoice(b, 10, items=(p2, p3)),
        make_invoice(c, 10, items=(p2,)),
    ]

    recs = recommend_products("C", invoices, [p1, p2, p3])

    assert [r.item_id for r in recs] == ["P1", "P3"]
    assert [r.score for r in recs] == [0.5, 0.5]
    assert recs[0].reasons == ["Similar client Alpha purchased this item"]
    assert recs[1].reasons == ["Similar client Beta purchased this item"]
    assert recs[0].name == "Product P1"
    assert recs[0].unit_price == 20.0
    assert recs[0].status == "in-stock"


def test_scores_accumulate_across_clients_and_rank_descending():
    p1, p2, p3, p4 = _catalogue("P1", "P2", "P3", "P4")
    target = make_client("T")
    invoices = [
        make_invoice(target, 5, items=(p1, p2)),
        make_invoice(make_client("A"), 5, items=(p1, p2, p3)),
        make_invoice(make_client("B"), 5, items=(p1, p3)),
        make_invoice(make_client("C"), 5, items=(p2, p4)),
    ]

    recs = recommend_products("T", invoices, [p1, p2, p3, p4])

    # P3: 2/3 + 1/2, P4: 1/2
    assert [r.item_id for r in recs] == ["P3", "P4"]
    assert recs[0].score > recs[1].score
    assert len(recs[0].reasons) == 2


def test_never_recommends_items_already_purchased():
    items = _catalogue("P1", "P2", "P3")
    target = make_client("T")
    invoices = [
        make_invoice(target, 5, items=tuple(items[:2])),
        make_invoice(make_client("O"), 5, items=tuple(items)),
    ]

    recs = recommend_products("T", invoices, items)

    assert {r.item_id for r in recs}.isdisjoint({"P1", "P2"})


def test_at_most_five_recommendations():
    shared = make_item("S")
    extras = _catalogue(*[f"X{i}" for i in range(8)])
    target = make_client("T")
    invoices = [
        make_invoice(target, 5, items=(shared,)),
        make_invoice(make_client("O"), 5, items=(shared, *extras)),
    ]

    recs = recommend_products("T", invoices, [shared, *extras])

    assert len(recs) == 5
    assert [r.item_id for r in recs] == ["X0", "X1", "X2", "X3", "X4"]


def test_unknown_client_or_no_history_yields_nothing():
    p1 = make_item("P1")
    invoices = [make_invoice(make_client("A"), 5, items=(p1,))]

    assert recommend_products("missing", invoices, [p1]) == []
    assert recommend_products("E", [make_invoice(make_client("E"), 5)], [p1]) == []


def test_item_missing_from_catalogue_uses_fallback_details():
    shared, gone = make_item("S"), make_item("G", status=ItemStatus.OUT_OF_STOCK)
    invoices = [
        make_invoice(make_client("T"), 5, items=(shared,)),
        make_invoice(make_client("O"), 5, items=(shared, gone)),
    ]

    rec = recommend_products("T", invoices, [shared])[0]

    assert rec.item_id == "G"
    assert rec.name == "Unknown Item"
    assert rec.unit_price == 0.0
    assert rec.status == "unknown"


def test_similarity():
    assert similarity({"a"}, {"a", "b"}) == 0.5
    assert similarity({"a", "b"}, {"c"}) == 0.0
    assert similarity(set(), {"a"}) == 0.0
