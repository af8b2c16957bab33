"""
PURPOSE: TradingView Alert Relay: webhook ingestion and alert normalization service.

Receives trading-signal payloads from TradingView (JSON alerts, strategy
order-fill messages, or loosely-shaped objects), normalizes them into
canonical alerts, stores them, and fans them out to live subscribers and
notification transports.
"""
