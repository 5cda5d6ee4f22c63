"""
Chart Controller

Owns the state of one live chart: time span, sample budget, the latest
series per query slot and the threshold line. A Poller drives tick(),
which fetches every query for a single shared end time and applies the
results. All view methods return plain Python structures.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from ..api.prometheus_client import PrometheusHttpClient, check_response
from ..api.queries import (
    MAX_SAMPLES,
    MIN_SAMPLES,
    PrometheusEndpoint,
    QUERY_TIMEOUT,
    get_max_samples_for_span,
    get_prometheus_url,
    get_series_from_response,
    get_series_name,
    get_threshold_data,
    get_x_domain,
    get_x_ticks,
    template_series_title,
)
from ..api.queries.constants import DEFAULT_TIMESPAN
from ..api.queries.labels import FormatSeriesTitle
from ..api.schemas import PrometheusResponse
from ..models import ChartSeries, ChartView, LabeledSeries, LegendEntry, ThresholdData
from ..tasks.poller import Poller, get_poll_delay
from ..utils.datetime import format_duration, format_time, get_duration
from .config import DEFAULT_THRESHOLD_TEXT, THRESHOLD_COLOR, X_TICK_COUNT, GraphType, get_series_color
from .tooltip import Tooltip, find_active_points, select_tooltip

logger = logging.getLogger("promchart.chart")


@dataclass(frozen=True)
class StructuredFetch:
    """One range query per entry in ``queries`` against ``base_path``."""
    base_path: str
    queries: Tuple[str, ...]
    options: Dict[str, Any] = field(default_factory=dict, compare=False)  # client settings: timeout, headers


@dataclass(frozen=True)
class CustomFetch:
    """Caller-supplied coroutine function producing one Prometheus response."""
    producer: Callable[[], Awaitable[Any]]


FetchOptions = Union[StructuredFetch, CustomFetch]


@dataclass(frozen=True)
class ChartState:
    """Results of the last applied tick. Replaced as a whole, never mutated."""
    slots: Tuple[Tuple[LabeledSeries, ...], ...] = ()
    threshold_data: Optional[ThresholdData] = None
    updated_at: Optional[float] = None


def _normalize_span(span: Optional[float]) -> float:
    if span is None:
        return DEFAULT_TIMESPAN
    if not isinstance(span, (int, float)) or isinstance(span, bool) or not math.isfinite(span) or span <= 0:
        logger.warning(f"Invalid timespan {span!r}, using {format_duration(DEFAULT_TIMESPAN)}")
        return DEFAULT_TIMESPAN
    return float(span)


def _normalize_samples(samples: Optional[int]) -> Optional[int]:
    """Clamp an explicit sample budget to [MIN_SAMPLES, MAX_SAMPLES]; invalid means derive."""
    if samples is None:
        return None
    if not isinstance(samples, (int, float)) or isinstance(samples, bool) or not math.isfinite(samples) or samples <= 0:
        logger.warning(f"Invalid samples {samples!r}, deriving from span")
        return None
    clamped = int(min(max(samples, MIN_SAMPLES), MAX_SAMPLES))
    if clamped != samples:
        logger.warning(f"samples {samples} out of range, using {clamped}")
    return clamped


class ChartController:
    """Live chart over one or more Prometheus range queries."""

    def __init__(
        self,
        name: str,
        fetch_options: FetchOptions,
        title: Optional[str] = None,
        graph_type: GraphType = GraphType.LINE,
        default_samples: Optional[int] = None,
        timespan: Optional[float] = None,
        poll_interval: Optional[float] = None,
        threshold: Optional[float] = None,
        threshold_text: Optional[str] = None,
        format_series_title: Optional[FormatSeriesTitle] = None,
        show_legend: bool = False,
        client: Optional[PrometheusHttpClient] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize chart controller.

        Args:
            name: Chart identifier used in the HTTP API
            fetch_options: StructuredFetch or CustomFetch
            graph_type: GraphType.AREA stacks series, GraphType.LINE doesn't
            default_samples: Explicit sample budget; overrides the span-derived one
            timespan: Visible window in ms (default 30m)
            poll_interval: Explicit poll delay in ms; default derives from span
            threshold: Constant reference value; falsy disables the threshold line
            threshold_text: Threshold legend and tooltip label
            format_series_title: (labels, query_index) -> series name
            client: Transport for StructuredFetch (default built from options)
            clock: Seconds since epoch, injectable for tests
        """
        if not isinstance(fetch_options, (StructuredFetch, CustomFetch)):
            raise TypeError(f"fetch_options must be StructuredFetch or CustomFetch, got {type(fetch_options).__name__}")

        self.name = name
        self.title = title or name
        self.fetch_options = fetch_options
        self.graph_type = GraphType(graph_type)
        self.default_samples = _normalize_samples(default_samples)
        self.poll_interval = poll_interval
        self.threshold = threshold
        self.threshold_text = threshold_text
        self.format_series_title = format_series_title
        self.show_legend = show_legend
        self.clock = clock

        if client is None and isinstance(fetch_options, StructuredFetch):
            client = PrometheusHttpClient(**fetch_options.options)
        self.client = client

        self.span = _normalize_span(timespan)
        self.samples = self.default_samples or get_max_samples_for_span(self.span)

        self._state = ChartState()
        self._issued_seq = 0
        self._applied_seq = 0
        self._closed = False
        self.poller = Poller(self.tick, name=f"chart {name}")

    @property
    def is_stack(self) -> bool:
        return self.graph_type == GraphType.AREA

    @property
    def poll_delay(self) -> float:
        return get_poll_delay(self.span, self.poll_interval)

    @property
    def queries_key(self) -> Optional[str]:
        """Non-empty queries joined; None for custom producers."""
        if isinstance(self.fetch_options, CustomFetch):
            return None
        return ",".join(q for q in self.fetch_options.queries if q)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> ChartState:
        return self._state

    # ---- lifecycle ----

    def start(self) -> bool:
        """(Re)establish polling for the current span and samples. Needs a running loop."""
        if self._closed:
            return False
        return self.poller.configure(self.poll_delay, self.queries_key, self.samples, self.span)

    def set_timespan(self, span: float) -> None:
        """Change the visible window; recomputes the sample budget and restarts polling."""
        self.span = _normalize_span(span)
        self.samples = self.default_samples or get_max_samples_for_span(self.span)
        logger.info(f"Chart {self.name}: span {format_duration(self.span)}, {self.samples} samples")
        if self.poller.running:
            self.start()

    def close(self) -> None:
        """Stop polling; responses still in flight are dropped."""
        self._closed = True
        self.poller.stop()

    # ---- ticking ----

    async def tick(self) -> bool:
        """
        Fetch all queries for one shared end time and apply the results.

        A query that fails keeps its previous slot. Results of a tick older
        than the last applied one are dropped, as is everything after close().

        Returns:
            True if the results were applied
        """
        if self._closed:
            return False

        self._issued_seq += 1
        seq = self._issued_seq
        now = self.clock() * 1000
        span = self.span
        samples = self.samples

        threshold_data = None
        if self.threshold:
            threshold_data = ThresholdData(
                threshold=self.threshold,
                samples=get_threshold_data(self.threshold, span, now),
                threshold_text=self.threshold_text,
            )

        results = await self._fetch_all(now, span, samples)

        if self._closed:
            logger.debug(f"Chart {self.name}: dropping tick {seq} after close")
            return False
        if seq <= self._applied_seq:
            logger.debug(f"Chart {self.name}: dropping stale tick {seq} (applied {self._applied_seq})")
            return False

        failures = [r for r in results if isinstance(r, BaseException)]
        for error in failures:
            logger.error(f"Chart {self.name}: query failed: {error}")
        if results and len(failures) == len(results):
            return False

        slots = list(self._state.slots)
        if len(slots) != len(results):
            slots = (slots + [() for _ in results])[:len(results)]
        for i, result in enumerate(results):
            if isinstance(result, BaseException):
                continue
            slots[i] = tuple(get_series_from_response(result, samples, span))

        # Readers in other threads see either the old or the new state
        self._state = ChartState(slots=tuple(slots), threshold_data=threshold_data, updated_at=now)
        self._applied_seq = seq
        logger.debug(f"Chart {self.name}: applied tick {seq}, {sum(len(s) for s in slots)} series")
        return True

    async def _fetch_all(self, now: float, span: float, samples: int) -> List[Any]:
        if isinstance(self.fetch_options, CustomFetch):
            coros = [self._produce()]
        else:
            coros = [self._fetch_query(query, now, span, samples) for query in self.fetch_options.queries]
        return list(await asyncio.gather(*coros, return_exceptions=True))

    async def _fetch_query(self, query: str, now: float, span: float, samples: int) -> Optional[PrometheusResponse]:
        if not query:
            return None
        url = get_prometheus_url(
            self.fetch_options.base_path,
            PrometheusEndpoint.QUERY_RANGE,
            end_time=now,
            query=query,
            samples=samples,
            timeout=QUERY_TIMEOUT,
            timespan=span,
        )
        return await self.client.fetch(url)

    async def _produce(self) -> Optional[PrometheusResponse]:
        response = await self.fetch_options.producer()
        if response is None:
            return None
        if not isinstance(response, PrometheusResponse):
            response = PrometheusResponse.model_validate(response)
        return check_response(response)

    # ---- views ----

    def get_chart_view(self) -> ChartView:
        """Resolve the current slots into named, colored series plus legend."""
        state = self._state
        series = []
        legend = []
        for i, slot in enumerate(state.slots):
            for labeled in slot:
                name = get_series_name(labeled.labels, i, self.format_series_title)
                color = get_series_color(len(series))
                series.append(ChartSeries(name=name, color=color, labels=labeled.labels, samples=labeled.samples))
                legend.append(LegendEntry(name=name, color=color))

        if state.threshold_data is not None:
            legend.append(LegendEntry(
                name=state.threshold_data.threshold_text or DEFAULT_THRESHOLD_TEXT,
                color=THRESHOLD_COLOR,
                symbol_type="threshold",
            ))

        end_time = state.updated_at if state.updated_at is not None else self.clock() * 1000
        return ChartView(
            series=series,
            legend=legend,
            x_domain=get_x_domain(end_time, self.span),
            span=self.span,
            samples=self.samples,
            is_stack=self.is_stack,
            show_legend=self.show_legend,
            threshold=state.threshold_data,
            updated_at=state.updated_at,
        )

    def get_chart_data(self) -> Dict[str, Any]:
        """Chart view as JSON-ready dict."""
        view = self.get_chart_view()
        threshold = None
        if view.threshold is not None:
            threshold = {
                "value": view.threshold.threshold,
                "text": view.threshold.label,
                "color": THRESHOLD_COLOR,
                "data": [s.to_pair() for s in view.threshold.samples],
            }
        return {
            "name": self.name,
            "title": self.title,
            "graph_type": self.graph_type.value,
            "is_stack": view.is_stack,
            "show_legend": view.show_legend,
            "span": view.span,
            "span_text": format_duration(view.span),
            "span_parts": get_duration(view.span)._asdict(),
            "samples": view.samples,
            "x_domain": list(view.x_domain),
            "x_ticks": [
                {"value": tick, "label": format_time(tick)}
                for tick in get_x_ticks(view.x_domain, X_TICK_COUNT)
            ],
            "updated_at": view.updated_at,
            "series": [
                {
                    "name": s.name,
                    "color": s.color,
                    "labels": s.labels,
                    "data": [sample.to_pair() for sample in s.samples],
                }
                for s in view.series
            ],
            "threshold": threshold,
            "legend": [
                {"name": e.name, "color": e.color, "symbol_type": e.symbol_type}
                for e in view.legend
            ],
        }

    def tooltip_at(self, x: float, y: float, width: float, height: float) -> Optional[Tooltip]:
        """Tooltip for a cursor at (x, y) on a width x height chart, or None."""
        view = self.get_chart_view()
        active_points, center, style = find_active_points(view, x, y, width, height)
        threshold = view.threshold.threshold if view.threshold else None
        return select_tooltip(
            active_points, center, height, width, x, style,
            threshold=threshold,
            threshold_text=self.threshold_text,
        )

    @classmethod
    def from_config(cls, chart_config: Any, client: Optional[PrometheusHttpClient] = None) -> "ChartController":
        """Build a controller from a ChartConfig."""
        options = {"timeout": chart_config.request_timeout, "headers": dict(chart_config.headers)}
        fetch_options = StructuredFetch(
            base_path=chart_config.base_path.rstrip("/"),
            queries=tuple(chart_config.queries),
            options=options,
        )
        return cls(
            name=chart_config.name,
            fetch_options=fetch_options,
            title=chart_config.title,
            graph_type=chart_config.graph_type,
            default_samples=chart_config.samples,
            timespan=chart_config.timespan,
            poll_interval=chart_config.poll_interval,
            threshold=chart_config.threshold,
            threshold_text=chart_config.threshold_text,
            format_series_title=template_series_title(chart_config.series_title) if chart_config.series_title else None,
            show_legend=chart_config.show_legend,
            client=client,
        )
