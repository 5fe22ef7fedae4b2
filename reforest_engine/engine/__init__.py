"""
Recommendation engine: validation, seasonal scoring, ranking, trends.

Modules:
  validator — Two-tier sensor reading validation (errors vs warnings).
  seasons   — Month -> season mapping and seasonal factor lookup.
  scorer    — Per-species range compatibility and confidence scoring.
  ranker    — Tolerance-band comparator chain and top-N selection.
  trends    — Reading-history trend analysis and alerts.
  service   — Orchestrates one recommendation request end to end.
  reporter  — JSON/CSV output for recommendations and trend reports.
"""
