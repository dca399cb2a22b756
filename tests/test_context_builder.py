"""Tests for analysis context assembly and prompt rendering."""
import json

from factories import NOW, make_client, make_invoice, make_item, make_snapshot

from invoice_insights.models.records import InvoiceStatus
from invoice_insights.models.schemas import AnalysisType
from invoice_insights.services.ai.context_builder import build_bundle, build_context, render_prompt


def _snapshot():
    acme, beta, gamma = make_client("1", "Acme"), make_client("2", "Beta"), make_client("3", "Gamma")
    widget, gadget, gizmo = make_item("1", "Widget", "100"), make_item("2", "Gadget", "50"), make_item("3", "Gizmo", "5")
    invoices = [
        make_invoice(acme, 10, "1500", items=(widget, gadget)),
        make_invoice(beta, 20, "400", items=(widget,)),
        # Gamma went quiet with a long-overdue bill
        make_invoice(gamma, 150, "900", status=InvoiceStatus.UNPAID, items=(gadget, gizmo)),
        make_invoice(gamma, 160, "900"),
    ]
    return make_snapshot(invoices, [acme, beta, gamma], [widget, gadget, gizmo])


def test_context_has_fixed_shape_for_every_type():
    bundle = build_bundle(_snapshot(), NOW)

    for analysis_type in AnalysisType:
        context = build_context(bundle, analysis_type)
        assert context.analysis_type == analysis_type
        assert context.summary.total_invoices == 4
        assert len(context.clients) == 3
        assert len(context.items) == 3
        assert [c.name for c in context.top_clients] == ["Gamma", "Acme", "Beta"]
        assert [i.name for i in context.top_items] == ["Widget", "Gadget", "Gizmo"]
        assert context.recent_activity.recent_invoices == 2
        assert context.recent_activity.overdue_invoices == 1


def test_churn_list_only_includes_scores_above_30():
    context = build_context(build_bundle(_snapshot(), NOW), AnalysisType.GENERAL_ANALYSIS)

    assert [r.client_name for r in context.churn_risk] == ["Gamma"]
    assert all(r.risk_score > 30 for r in context.churn_risk)
    assert context.focus == {}


def test_focus_matches_analysis_type():
    bundle = build_bundle(_snapshot(), NOW)

    product = build_context(bundle, AnalysisType.PRODUCT_RECOMMENDATION).focus
    assert [c["name"] for c in product["top_clients"]] == ["Gamma", "Acme", "Beta"]

    churn = build_context(bundle, AnalysisType.CHURN_RISK).focus
    assert [r["client_name"] for r in churn["high_risk_clients"]] == ["Gamma"]

    pattern = build_context(bundle, AnalysisType.PATTERN_ANALYSIS).focus
    assert pattern["timeframe"] == "3months"
    assert {c["client_name"] for c in pattern["pattern_changes"]} == {"Gamma"}

    cross_sell = build_context(bundle, AnalysisType.CROSS_SELL_UPSELL).focus
    assert [r["name"] for r in cross_sell["cross_sell_candidates"]["Beta"]] == ["Gadget"]


def test_prompt_contains_query_and_money_formatting():
    bundle = build_bundle(_snapshot(), NOW)
    context = build_context(bundle, AnalysisType.CHURN_RISK)

    prompt = render_prompt("Who might churn?", context)

    assert 'USER QUERY: "Who might churn?"' in prompt
    assert "- Total Revenue: $2,800.00" in prompt
    assert "- Gamma: $1,800.00 (2 invoices)" in prompt
    assert "ANALYSIS FOCUS (churn_risk):" in prompt
    focus_json = prompt.split("ANALYSIS FOCUS (churn_risk):\n", 1)[1].split("\n\nUSER QUERY", 1)[0]
    assert json.loads(focus_json)["high_risk_clients"][0]["client_name"] == "Gamma"
