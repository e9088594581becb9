"""Teletext-style news aggregator."""
