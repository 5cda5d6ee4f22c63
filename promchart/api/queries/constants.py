"""
Query constants.

Sample budget limits and polling floors shared by the query helpers
and the chart controller.
"""

# Min and max number of data samples per data series
MIN_SAMPLES = 10
MAX_SAMPLES = 300

# Minimum step (milliseconds between data samples)
MIN_STEP = 5 * 1000

# Don't poll more often than this number of milliseconds
MIN_POLL_INTERVAL = 10 * 1000

# Span divisor for the default poll delay
POLL_SPAN_DIVISOR = 120

DEFAULT_TIMESPAN = 30 * 60 * 1000
DEFAULT_SAMPLES = 30

# Server-side evaluation timeout passed with every chart query
QUERY_TIMEOUT = "30s"
