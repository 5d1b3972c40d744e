from __future__ import annotations

# ABI word and selector widths (bytes)
WORD_SIZE     = 32
SELECTOR_SIZE = 4
ADDRESS_SIZE  = 20

# canonical buffer header schema
HEADER_VERSION = 1
