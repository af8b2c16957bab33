"""
PURPOSE: Webhook module for the alert relay: handles inbound TradingView alerts.

Normalizes JSON alerts, strategy order-fill messages and loosely shaped
objects into canonical alerts (classifier -> extractor -> validator) and
hands accepted alerts to the store.
"""
