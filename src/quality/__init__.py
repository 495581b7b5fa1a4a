"""Data quality scorecard engine.

Profiles tables per group, cleanses text columns, computes missing /
duplicate / invalid / outlier totals and grades them on an A-F scorecard.

Deterministic -- pure computation over an injected TableAccessor. The
engine only emits log events; the embedding application calls
`src.observability.log_config.configure_logging` once at startup.
"""
