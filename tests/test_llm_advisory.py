from __future__ import annotations

import json

import pytest

from clubfolio.llm.advisory import (
    MISSING_KEY_MESSAGE,
    AdvisoryError,
    AdvisorySlot,
    classify_assets,
    generate_text,
    market_analysis,
    portfolio_risk_analysis,
    request_text,
    StockModel,
    reit_analysis,
    reit_prompt,
    stock_model_analysis,
    stock_model_prompt,
    valuation_model_analysis,
    yield_curve_analysis,
)
from conftest import make_openai_client


def test_generate_text_returns_model_output(test_settings, mock_openai_client):
    out = generate_text("hello", settings=test_settings, client=mock_openai_client)
    assert out == "analysis text"
    kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["messages"] == [{"role": "user", "content": "hello"}]


def test_missing_key_returns_configuration_message(keyless_settings):
    assert generate_text("hello", settings=keyless_settings) == MISSING_KEY_MESSAGE
    with pytest.raises(AdvisoryError):
        request_text("hello", settings=keyless_settings)


def test_api_failure_becomes_error_string(test_settings, mock_openai_client):
    mock_openai_client.chat.completions.create.side_effect = RuntimeError("rate limited")
    out = market_analysis("AAPL", settings=test_settings, client=mock_openai_client)
    assert out == "An error occurred while fetching analysis: rate limited"


def test_prompt_helpers_embed_inputs(test_settings, mock_openai_client, seed_data):
    portfolio_risk_analysis(seed_data.holdings, settings=test_settings, client=mock_openai_client)
    prompt = mock_openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert '"asset": "AAPL"' in prompt and '"value": 5250.0' in prompt

    yield_curve_analysis(settings=test_settings, client=mock_openai_client)
    prompt = mock_openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert "yield curve" in prompt

    assert stock_model_analysis("DCF for MSFT?", settings=test_settings, client=mock_openai_client) == "analysis text"


def test_stock_model_prompts_embed_model_inputs():
    dcf = stock_model_prompt("dcf", "MSFT", growth_rate=12, discount_rate=9.5)
    assert "Discounted Cash Flow" in dcf
    assert "growth rate of 12% and a discount rate of 9.5%" in dcf

    graham = stock_model_prompt(StockModel.GRAHAM, "AAPL", eps=6.5, growth_rate=7)
    assert "EPS * (8.5 + 2g)" in graham and "EPS of $6.5" in graham and "(g) of 7%" in graham

    safety = stock_model_prompt(StockModel.SAFETY_MARGIN, "AAPL", current_price=150)
    assert "Margin of Safety" in safety and "is $150." in safety

    bond = stock_model_prompt(StockModel.BOND, "IBM", face_value=1000, coupon_rate=4.5, maturity_years=7, market_rate=6)
    assert "face value of $1000, a coupon rate of 4.5%, maturing in 7 years" in bond
    assert "market interest rate (discount rate) of 6%" in bond

    etf = stock_model_prompt("etf", "SPY", growth_rate=99)
    assert "ETF with ticker SPY" in etf and "99" not in etf
    assert all(p.endswith("Do not use markdown.") for p in (dcf, graham, safety, bond, etf))


def test_stock_model_prompt_rejects_unknown_model():
    with pytest.raises(ValueError):
        stock_model_prompt("black_scholes", "AAPL")


def test_reit_and_valuation_helpers_send_built_prompts(test_settings, mock_openai_client):
    assert "sample FFO of $3.80 per share" in reit_prompt("O")

    reit_analysis("O", 4.1, settings=test_settings, client=mock_openai_client)
    prompt = mock_openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert "REIT with ticker O" in prompt and "$4.10" in prompt

    out = valuation_model_analysis("bond", "T", {"coupon_rate": 3}, settings=test_settings, client=mock_openai_client)
    assert out == "analysis text"
    prompt = mock_openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert "coupon rate of 3%" in prompt


def test_classify_assets_parses_wrapped_json(test_settings):
    payload = {"assets": [{"ticker": "AAPL", "sector": "Technology", "geography": "USA", "assetType": "Common Stock"}]}
    client = make_openai_client(json.dumps(payload))
    out = classify_assets(["AAPL"], settings=test_settings, client=client)
    assert out[0].asset_type == "Common Stock"
    assert client.chat.completions.create.call_args.kwargs["response_format"] == {"type": "json_object"}


def test_classify_assets_accepts_bare_list(test_settings):
    payload = [{"ticker": "SHEL", "sector": "Energy", "geography": "UK", "assetType": "ADR"}]
    out = classify_assets(["SHEL"], settings=test_settings, client=make_openai_client(json.dumps(payload)))
    assert (out[0].sector, out[0].geography) == ("Energy", "UK")


@pytest.mark.parametrize("content", ["not json", '{"assets": [{"ticker": "AAPL"}]}', '{"other": 1}'])
def test_classify_assets_falls_back_on_bad_output(test_settings, content):
    out = classify_assets(["AAPL", "XAU/USD"], settings=test_settings, client=make_openai_client(content))
    assert [(d.ticker, d.sector, d.geography, d.asset_type) for d in out] == [
        ("AAPL", "Technology", "USA", "Equity"),
        ("XAU/USD", "Other", "USA", "Equity"),
    ]


def test_classify_assets_without_key_falls_back(keyless_settings):
    out = classify_assets(["MSFT"], settings=keyless_settings)
    assert out[0].sector == "Technology"


def test_classify_assets_empty_input_skips_service(test_settings, mock_openai_client):
    assert classify_assets([], settings=test_settings, client=mock_openai_client) == []
    mock_openai_client.chat.completions.create.assert_not_called()


def test_advisory_slot_success_and_error():
    slot = AdvisorySlot("market")
    assert slot.status == AdvisorySlot.IDLE

    fut = slot.submit(lambda x: x.upper(), "ok")
    assert fut.result(timeout=5) == "OK"
    assert slot.snapshot() == {"name": "market", "status": "success", "result": "OK", "error": None}

    def boom():
        raise AdvisoryError("service down")

    fut = slot.submit(boom)
    assert isinstance(fut.exception(timeout=5), AdvisoryError)
    snap = slot.snapshot()
    assert snap["status"] == "error"
    assert snap["error"] == "service down"
    assert snap["result"] is None
