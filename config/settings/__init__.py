"""Settings package for the rental marketplace.

`base.py` holds the configuration shared across environments. `dev.py`,
`prod.py` and `test.py` extend it with environment specific overrides.
"""
