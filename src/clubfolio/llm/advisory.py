"""
Advisory text collaborator.

Wraps an OpenAI-compatible chat completions endpoint behind two seams:
- ``generate_text(prompt) -> str``: never raises; failures come back as a
  user-visible message string.
- ``classify_assets(tickers) -> list[AssetDetails]``: never raises; any failure
  returns a deterministic offline classification so allocation views keep working.

``request_text`` is the raising variant, used by ``AdvisorySlot`` to keep a
pending/success/error state per call site.

Usage:
    from clubfolio.llm.advisory import market_analysis, classify_assets

    text = market_analysis("AAPL")
    details = classify_assets(["AAPL", "XAU/USD"])
"""
from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Sequence

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from clubfolio.config import Settings
from clubfolio.utils.settings import safe_load_settings

logger = logging.getLogger(__name__)

FALLBACK_TECH_TICKERS = ("AAPL", "GOOGL", "MSFT")
MISSING_KEY_MESSAGE = "Error: advisory API key is not configured. Please set the OPENAI_API_KEY environment variable."


class AdvisoryError(RuntimeError):
    """The advisory service could not produce an answer (config, network, auth, parse)."""


class AssetDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ticker: str
    sector: str
    geography: str
    asset_type: str = Field(alias="assetType")


_ASSET_LIST = TypeAdapter(list[AssetDetails])


def _make_client(settings: Settings) -> Any:
    if not settings.openai_api_key:
        raise AdvisoryError(MISSING_KEY_MESSAGE)
    try:
        from openai import OpenAI  # type: ignore
    except Exception as e:  # pragma: no cover
        raise AdvisoryError("openai package is not installed. Try: pip install -e .") from e
    return OpenAI(api_key=settings.openai_api_key, base_url=settings.OPENAI_BASE_URL)


def request_text(
    prompt: str,
    *,
    settings: Settings | None = None,
    client: Any | None = None,
    model: str | None = None,
    temperature: float = 0.2,
    response_format: dict[str, Any] | None = None,
) -> str:
    """
    Raising variant of ``generate_text``.

    Raises:
        AdvisoryError: missing key, transport/auth failure, or empty response.
    """
    settings = settings or safe_load_settings()
    client = client or _make_client(settings)
    kwargs: dict[str, Any] = {
        "model": model or settings.openai_model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": float(temperature),
    }
    if response_format is not None:
        kwargs["response_format"] = response_format
    try:
        resp = client.chat.completions.create(**kwargs)
    except Exception as e:
        raise AdvisoryError(str(e) or type(e).__name__) from e
    text = str(resp.choices[0].message.content or "").strip()
    if not text:
        raise AdvisoryError("empty response from advisory service")
    return text


def generate_text(
    prompt: str,
    *,
    settings: Settings | None = None,
    client: Any | None = None,
    model: str | None = None,
) -> str:
    """Advisory text for `prompt`, or an error message string. Never raises."""
    try:
        return request_text(prompt, settings=settings, client=client, model=model)
    except AdvisoryError as e:
        if str(e) == MISSING_KEY_MESSAGE:
            logger.warning("advisory service not configured")
            return MISSING_KEY_MESSAGE
        logger.warning("Error fetching analysis from advisory service: %s", e)
        return f"An error occurred while fetching analysis: {e}"


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------

def market_analysis_prompt(ticker: str) -> str:
    return (
        f"Provide a brief, balanced analysis for the stock ticker {ticker}. Include a summary of recent news, "
        "potential bullish points, and potential bearish points. Format the output as a simple text summary. "
        "Do not use markdown."
    )


def portfolio_risk_prompt(holdings: Sequence[Any]) -> str:
    payload = json.dumps([{"asset": h.asset, "value": h.market_value} for h in holdings])
    return (
        f"Given the following portfolio holdings (asset, market value): {payload}. "
        "Provide a brief qualitative risk analysis. Mention concentration risk, sector-specific risks if "
        "identifiable (e.g., heavy in tech), and general market risks relevant to these assets. "
        "Format as a simple text summary with paragraphs. Do not use markdown."
    )


YIELD_CURVE_PROMPT = (
    "Provide a concise analysis of the current US Treasury yield curve. Explain its current shape "
    "(e.g., normal, inverted, flat) and what it implies for the economy and for stock market investors. "
    "Format as a simple text summary. Do not use markdown."
)


class StockModel(str, Enum):
    DCF = "dcf"
    GRAHAM = "graham"
    SAFETY_MARGIN = "safety_margin"
    BOND = "bond"
    ETF = "etf"


def _fig(x: float) -> str:
    return f"{float(x):g}"


def stock_model_prompt(
    model: StockModel | str,
    ticker: str,
    *,
    growth_rate: float = 10.0,
    discount_rate: float = 8.0,
    eps: float = 6.0,
    current_price: float = 175.0,
    face_value: float = 1000.0,
    coupon_rate: float = 5.0,
    maturity_years: float = 10.0,
    market_rate: float = 6.0,
) -> str:
    """
    Educational valuation-model prompt for one ticker.

    Rates are in percent. Only the inputs the chosen model uses end up in the text.

    Raises:
        ValueError: unknown model name.
    """
    m = StockModel(model)
    g = _fig(growth_rate)
    if m == StockModel.DCF:
        body = (
            "Explain a simple Discounted Cash Flow (DCF) model for stock valuation. Then, provide a sample "
            f"calculation for a hypothetical company similar to {ticker} using a future free cash flow growth "
            f"rate of {g}% and a discount rate of {_fig(discount_rate)}%. Explain the inputs and the result. "
            "Keep it educational."
        )
    elif m == StockModel.GRAHAM:
        body = (
            "Explain Benjamin Graham's intrinsic value formula: Value = EPS * (8.5 + 2g). Explain each component. "
            f"Then, calculate the intrinsic value for a stock like {ticker} with a current EPS of ${_fig(eps)} "
            f"and an estimated annual growth rate (g) of {g}% for the next 7-10 years."
        )
    elif m == StockModel.SAFETY_MARGIN:
        body = (
            'Explain the concept of "Margin of Safety" in value investing, as popularized by Benjamin Graham. '
            f"Then, using an intrinsic value calculated from Graham's formula (EPS of ${_fig(eps)}, growth rate "
            f"of {g}%), calculate the margin of safety if the current market price for a stock like {ticker} "
            f"is ${_fig(current_price)}. Explain what the result means for an investor."
        )
    elif m == StockModel.BOND:
        body = (
            "Explain how to value a bond based on its coupon rate, face value, years to maturity, and the current "
            f"market interest rate. Then provide a sample calculation for a bond from an issuer like {ticker} with "
            f"a face value of ${_fig(face_value)}, a coupon rate of {_fig(coupon_rate)}%, maturing in "
            f"{_fig(maturity_years)} years, assuming a market interest rate (discount rate) of {_fig(market_rate)}%."
        )
    else:
        body = (
            f"Provide a detailed analysis of the ETF with ticker {ticker}. Include its investment strategy, top 10 "
            "holdings, expense ratio, and a summary of its recent performance. Also, mention its primary sector "
            "exposures and potential risks for an investor."
        )
    return f"{body} Format as simple text. Do not use markdown."


def reit_prompt(ticker: str, ffo: float = 3.80) -> str:
    return (
        f"Provide a detailed analysis of the REIT with ticker {ticker}. Explain key REIT metrics like Funds From "
        "Operations (FFO) and Adjusted Funds From Operations (AFFO). Analyze "
        f"{ticker} based on its property portfolio type, geographic diversification, occupancy rates, and "
        f"dividend history. If available, use a Price/FFO multiple analysis (using a sample FFO of ${float(ffo):.2f} "
        "per share) to discuss its valuation. Format as simple text. Do not use markdown."
    )


def market_analysis(ticker: str, **kwargs: Any) -> str:
    return generate_text(market_analysis_prompt(ticker), **kwargs)


def portfolio_risk_analysis(holdings: Sequence[Any], **kwargs: Any) -> str:
    return generate_text(portfolio_risk_prompt(holdings), **kwargs)


def yield_curve_analysis(**kwargs: Any) -> str:
    return generate_text(YIELD_CURVE_PROMPT, **kwargs)


def stock_model_analysis(prompt: str, **kwargs: Any) -> str:
    return generate_text(prompt, **kwargs)


def valuation_model_analysis(
    model: StockModel | str,
    ticker: str,
    inputs: dict[str, float] | None = None,
    **kwargs: Any,
) -> str:
    return generate_text(stock_model_prompt(model, ticker, **(inputs or {})), **kwargs)


def reit_analysis(ticker: str, ffo: float = 3.80, **kwargs: Any) -> str:
    return generate_text(reit_prompt(ticker, ffo), **kwargs)


# ---------------------------------------------------------------------------
# Asset classification
# ---------------------------------------------------------------------------

def fallback_asset_details(tickers: Sequence[str]) -> list[AssetDetails]:
    """Offline classification: known big tech is Technology, everything else Other."""
    return [
        AssetDetails(
            ticker=t,
            sector="Technology" if str(t).upper() in FALLBACK_TECH_TICKERS else "Other",
            geography="USA",
            asset_type="Equity",
        )
        for t in tickers
    ]


def _parse_asset_details(text: str) -> list[AssetDetails]:
    data = json.loads(text)
    if isinstance(data, dict):
        # JSON-object mode wraps the list.
        data = data.get("assets")
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of asset details")
    return _ASSET_LIST.validate_python(data)


def classify_assets(
    tickers: Sequence[str],
    *,
    settings: Settings | None = None,
    client: Any | None = None,
) -> list[AssetDetails]:
    """Sector / geography / asset type per ticker; falls back offline on any failure."""
    tickers = [str(t) for t in tickers if str(t).strip()]
    if not tickers:
        return []
    prompt = (
        f"For the following stock tickers: {', '.join(tickers)}. Provide their primary sector "
        "(e.g., Technology, Healthcare, Financials), geography (country of primary listing, e.g., USA, China), "
        "and asset type (e.g., Common Stock, ETF).\n"
        'Return ONLY JSON of the form {"assets": [{"ticker": "...", "sector": "...", '
        '"geography": "...", "assetType": "..."}]}.'
    )
    try:
        text = request_text(prompt, settings=settings, client=client, response_format={"type": "json_object"})
        return _parse_asset_details(text)
    except (AdvisoryError, ValueError) as e:
        # pydantic.ValidationError and json.JSONDecodeError are ValueErrors.
        logger.warning("asset classification failed, using offline fallback: %s", e)
        return fallback_asset_details(tickers)


# ---------------------------------------------------------------------------
# Per-call-site request state
# ---------------------------------------------------------------------------

_EXECUTOR = ThreadPoolExecutor(max_workers=4, thread_name_prefix="advisory")


class AdvisorySlot:
    """
    Pending / success / error state for one advisory call site.

    ``submit`` runs the call on a background thread and returns immediately.
    Nothing is cancelled: whichever call completes last overwrites the state.
    """

    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"

    def __init__(self, name: str = "advisory"):
        self.name = name
        self._lock = threading.Lock()
        self.status = self.IDLE
        self.result: Any = None
        self.error: str | None = None

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        with self._lock:
            self.status = self.PENDING
            self.error = None
        return _EXECUTOR.submit(self._call, fn, args, kwargs)

    def _call(self, fn: Callable[..., Any], args: tuple, kwargs: dict[str, Any]) -> Any:
        # State is written before the future resolves, so waiters see the final state.
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            logger.warning("%s call failed: %s", self.name, e)
            with self._lock:
                self.status = self.ERROR
                self.error = str(e) or type(e).__name__
                self.result = None
            raise
        with self._lock:
            self.status = self.SUCCESS
            self.result = result
            self.error = None
        return result

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {"name": self.name, "status": self.status, "result": self.result, "error": self.error}
