"""Barometer: cached aggregation of civil-alert, prediction-market and weather feeds."""
