"""Publish bounded context.

- model / config: release values and typed settings
- expansion / whatsnew / release: pure release construction
- client / auth: Google Play API adapters
- uploads / service: upload steps and their sequencing
"""

from __future__ import annotations
