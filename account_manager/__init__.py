"""
Account Manager - Source Package

The persistence and reconciliation core of a small credential/account
manager: a local JSON document of accounts and family groups, fed by
bulk-pasted account dumps.

DESIGN PRINCIPLES:
1. Every read and every write goes through the Normalizer
2. Imports add or change data, never erase it
3. Bad data is repaired silently and deterministically; bad storage fails loudly
4. Every operation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Account Manager Team"
