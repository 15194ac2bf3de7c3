"""
Weather pipeline: provider fallback, synthetic climate model, normalization.

- providers: NASA POWER -> GMAO -> Worldview adapters and the fallback chain.
- climate_model: synthetic values, full synthetic weather, historical series.
- conditions: condition text, weather codes, feels-like temperature.
- validation: -999 sentinel handling for provider payloads.
- probability: threshold exceedance from historical series.
- formatter: response rounding/percent strings and CSV export.
- observations: POWER historical analysis for a calendar date.
- geocoding: city search proxy.
"""
